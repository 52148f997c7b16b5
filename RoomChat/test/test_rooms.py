"""
Unit tests for the room directory and the shared state that keeps it
consistent with the connection registry.
"""

from RoomChat.core.server.rooms import Room, RoomDirectory
from RoomChat.core.server.state import ChatState


class TestRoomDirectory:
    """Tests for RoomDirectory."""

    def setup_method(self):
        """Set up test fixtures."""
        self.directory = RoomDirectory()

    def test_ensure_is_idempotent(self):
        """Test ensure returns the same room on repeated calls."""
        room = self.directory.ensure("lobby")

        assert self.directory.ensure("lobby") is room
        assert room.members == set()
        assert room.password == ""
        assert len(self.directory) == 1

    def test_add_member_creates_room(self):
        """Test adding a member to an unknown room creates it."""
        room = self.directory.add_member("lobby", "c1")

        assert "lobby" in self.directory
        assert room.members == {"c1"}

    def test_remove_last_member_deletes_room(self):
        """Test a room is deleted as soon as it empties."""
        self.directory.add_member("lobby", "c1")
        self.directory.add_member("lobby", "c2")

        assert self.directory.remove_member("lobby", "c1") is False
        assert "lobby" in self.directory

        assert self.directory.remove_member("lobby", "c2") is True
        assert "lobby" not in self.directory

    def test_remove_from_unknown_room(self):
        assert self.directory.remove_member("nowhere", "c1") is False

    def test_members_returns_copy(self):
        """Test callers cannot mutate the member set."""
        self.directory.add_member("lobby", "c1")

        members = self.directory.members("lobby")
        members.add("intruder")

        assert self.directory.members("lobby") == {"c1"}
        assert self.directory.members("nowhere") == set()

    def test_list_rooms_sorted(self):
        """Test listing is lexicographic."""
        for name in ("zeta", "alpha", "Mid", "beta"):
            self.directory.add_member(name, "c-" + name)

        assert self.directory.list_rooms() == ["Mid", "alpha", "beta", "zeta"]

    def test_list_rooms_skips_empty(self):
        """Test an ensured but empty room is not listed."""
        self.directory.ensure("ghost")
        self.directory.add_member("lobby", "c1")

        assert self.directory.list_rooms() == ["lobby"]

    def test_set_password_once(self):
        """Test the first password sticks for the room's lifetime."""
        self.directory.add_member("vip", "c1")

        assert self.directory.set_password("vip", "secret") is True
        assert self.directory.set_password("vip", "other") is False
        assert self.directory.required_password("vip") == "secret"
        assert self.directory.get("vip").is_protected

    def test_set_password_requires_room(self):
        assert self.directory.set_password("nowhere", "secret") is False

    def test_empty_password_is_ignored(self):
        self.directory.add_member("open", "c1")

        assert self.directory.set_password("open", "") is False
        assert self.directory.required_password("open") == ""

    def test_password_deleted_with_room(self):
        """Test a recreated room starts without a password."""
        self.directory.add_member("vip", "c1")
        self.directory.set_password("vip", "secret")
        self.directory.remove_member("vip", "c1")

        self.directory.add_member("vip", "c2")
        assert self.directory.required_password("vip") == ""

    def test_room_is_protected(self):
        assert not Room(name="a").is_protected
        assert Room(name="a", password="pw").is_protected


class TestChatState:
    """Tests for ChatState room moves."""

    def setup_method(self):
        """Set up test fixtures."""
        self.state = ChatState()
        self.state.registry.register("c1")
        self.state.registry.register("c2")

    def test_move_to_room(self):
        """Test joining a room updates both tables."""
        assert self.state.move_to_room("c1", "lobby") is None

        assert self.state.registry.get("c1").room == "lobby"
        assert self.state.directory.members("lobby") == {"c1"}

    def test_move_leaves_previous_room(self):
        """Test a connection is a member of at most one room."""
        self.state.move_to_room("c1", "a")
        self.state.move_to_room("c2", "a")

        assert self.state.move_to_room("c1", "b") == "a"

        assert self.state.directory.members("a") == {"c2"}
        assert self.state.directory.members("b") == {"c1"}

    def test_move_deletes_emptied_room(self):
        self.state.move_to_room("c1", "a")
        self.state.move_to_room("c1", "b")

        assert "a" not in self.state.directory
        assert self.state.directory.list_rooms() == ["b"]

    def test_move_to_same_room_is_noop(self):
        """Test re-entering the current room keeps the room and its password."""
        self.state.move_to_room("c1", "vip")
        self.state.directory.set_password("vip", "secret")

        assert self.state.move_to_room("c1", "vip") is None
        assert self.state.directory.members("vip") == {"c1"}
        assert self.state.directory.required_password("vip") == "secret"

    def test_move_unknown_connection(self):
        """Test moving an unregistered id leaves the directory untouched."""
        assert self.state.move_to_room("missing", "lobby") is None
        assert "lobby" not in self.state.directory

    def test_leave_room(self):
        self.state.move_to_room("c1", "lobby")

        assert self.state.leave_room("c1") == "lobby"
        assert self.state.registry.get("c1").room is None
        assert "lobby" not in self.state.directory
        assert self.state.leave_room("c1") is None

    def test_drop_is_idempotent(self):
        """Test dropping removes the record and membership, twice is harmless."""
        self.state.move_to_room("c1", "lobby")
        self.state.move_to_room("c2", "lobby")

        self.state.drop("c1")
        self.state.drop("c1")

        assert "c1" not in self.state.registry
        assert self.state.directory.members("lobby") == {"c2"}
