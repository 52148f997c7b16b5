r"""
    ____                        ________          __
   / __ \____  ____  ____ ___  / ____/ /_  ____ _/ /_
  / /_/ / __ \/ __ \/ __ `__ \/ /   / __ \/ __ `/ __/
 / _, _/ /_/ / /_/ / / / / / / /___/ / / / /_/ / /_
/_/ |_|\____/\____/_/ /_/ /_/\____/_/ /_/\__,_/\__/

RoomChat Project - A real-time multi-room broadcast chat service.

Clients connect over a websocket, introduce themselves with a display name,
create or join named (optionally password-protected) rooms, and exchange
text messages with everyone in the same room.
"""

__version__ = "1.0.0"
