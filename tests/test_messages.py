"""Tests for inbound and outbound message schemas."""

import json

import pytest

from storm_adapter.messages import (
    AckMessage,
    CommandMessage,
    EmitMessage,
    ErrorMessage,
    FailMessage,
    HandshakeMessage,
    InMessage,
    LogMessage,
    MetricsMessage,
    PidMessage,
    SyncMessage,
    TaskIdsMessage,
    TupleMessage,
)
from storm_adapter.protocol import LOG_WARN, MessageDecodeError


class TestInboundDecoding:
    def test_handshake(self):
        msg = HandshakeMessage.from_dict(
            {"conf": {"topology.name": "wc"}, "context": {"taskid": 3}, "pidDir": "/tmp/pids"}
        )
        assert msg.conf == {"topology.name": "wc"}
        assert msg.context == {"taskid": 3}
        assert msg.pid_dir == "/tmp/pids"

    def test_command_without_id(self):
        msg = CommandMessage.from_dict({"command": "next"})
        assert msg.command == "next"
        assert msg.id is None

    def test_command_with_id(self):
        msg = CommandMessage.from_dict({"command": "ack", "id": "abc"})
        assert msg.id == "abc"

    def test_tuple(self):
        msg = TupleMessage.from_dict(
            {"id": "-6955786537413359385", "comp": "spout", "stream": "default",
             "task": 9, "tuple": ["snow white"]}
        )
        assert msg.component == "spout"
        assert msg.values == ["snow white"]
        assert not msg.is_heartbeat

    def test_heartbeat_tuple(self):
        msg = TupleMessage.from_dict(
            {"id": "x", "comp": None, "stream": "__heartbeat", "task": -1, "tuple": []}
        )
        assert msg.is_heartbeat

    def test_missing_key_rejected(self):
        with pytest.raises(MessageDecodeError):
            TupleMessage.from_dict({"id": 1, "comp": "spout", "task": 1, "tuple": []})

    def test_tuple_without_comp_or_id(self):
        msg = TupleMessage.from_dict({"stream": "default", "task": 1, "tuple": ["a"]})
        assert msg.component is None
        assert msg.id is None

    def test_unknown_keys_ignored(self):
        msg = CommandMessage.from_dict({"command": "next", "extra": 1})
        assert msg == CommandMessage(command="next")

    def test_unknown_keys_ignored_for_tuple(self):
        msg = TupleMessage.from_dict(
            {"id": "1", "comp": "spout", "stream": "default", "task": 2,
             "tuple": ["x"], "root": "99"}
        )
        assert msg.values == ["x"]

    def test_non_dataclass_type_is_a_programming_error(self):
        with pytest.raises(TypeError, match="not a message dataclass"):
            InMessage.from_dict({"command": "next"})

    def test_wrong_field_type_rejected(self):
        with pytest.raises(MessageDecodeError):
            CommandMessage.from_dict({"command": 5})

    def test_array_root_rejected_for_object_type(self):
        with pytest.raises(MessageDecodeError, match="JSON object"):
            CommandMessage.from_dict(["next"])

    def test_task_ids(self):
        assert TaskIdsMessage.from_list([1, 2]).task_ids == [1, 2]

    def test_task_ids_rejects_object(self):
        with pytest.raises(MessageDecodeError):
            TaskIdsMessage.from_list({"a": 1})


class TestOutboundEncoding:
    def test_pid(self):
        assert PidMessage(pid=42).to_dict() == {"pid": 42}

    def test_sync(self):
        assert json.loads(SyncMessage().to_json()) == {"command": "sync"}

    def test_emit_omits_unset_fields(self):
        assert EmitMessage(values=["a", 1]).to_dict() == {
            "command": "emit",
            "tuple": ["a", 1],
            "need_task_ids": True,
        }

    def test_emit_full(self):
        msg = EmitMessage(values=["w"], stream="words", task=4, anchors=["1"], id=7,
                          need_task_ids=False)
        assert msg.to_dict() == {
            "command": "emit",
            "tuple": ["w"],
            "stream": "words",
            "task": 4,
            "anchors": ["1"],
            "id": 7,
            "need_task_ids": False,
        }

    def test_ack_and_fail(self):
        assert AckMessage(id="1").to_dict() == {"command": "ack", "id": "1"}
        assert FailMessage(id="1").to_dict() == {"command": "fail", "id": "1"}

    def test_log(self):
        assert LogMessage(msg="hi", level=LOG_WARN).to_dict() == {
            "command": "log", "msg": "hi", "level": 3,
        }

    def test_error_and_metrics(self):
        assert ErrorMessage(msg="boom").to_dict() == {"command": "error", "msg": "boom"}
        assert MetricsMessage(name="latency", params=12).to_dict() == {
            "command": "metrics", "name": "latency", "params": 12,
        }

    def test_str_is_json(self):
        assert json.loads(str(AckMessage(id=3))) == {"command": "ack", "id": 3}

    def test_inbound_renders_wire_keys(self):
        msg = TupleMessage(id=1, component="spout", stream="s", task=2, values=[3])
        assert msg.to_dict() == {"id": 1, "comp": "spout", "stream": "s", "task": 2, "tuple": [3]}

    def test_inbound_keeps_none_fields(self):
        msg = TupleMessage(id=None, component=None, stream="s", task=2, values=[])
        assert msg.to_dict() == {"id": None, "comp": None, "stream": "s", "task": 2, "tuple": []}
        assert CommandMessage(command="next").to_dict() == {"command": "next", "id": None}
