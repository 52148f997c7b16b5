from .message.protocol import Packet, PacketType, OutboundType

__all__ = ['Packet', 'PacketType', 'OutboundType']
