"""Tests for envconfig.schema: record type descriptions."""

import dataclasses
from dataclasses import dataclass, field

import pytest

from envconfig.errors import UnsupportedTypeError
from envconfig.schema import ENV_TAG_KEY, FieldSpec, RecordType, describe_record, env_field, is_record_type


@dataclass
class TLSConfig:
    cert: str = env_field("TLS_CERT,parser=possibly-empty-string")


@dataclass
class ServerConfig:
    host: str = env_field("HOST,parser=nonempty-string,default=0.0.0.0")
    port: int = env_field("PORT,parser=int", default=0)
    tls: TLSConfig = field(default_factory=TLSConfig)


@dataclass
class ForwardRefConfig:
    tls: "TLSConfig" = field(default_factory=TLSConfig)


class TestDescribeRecord:
    def test_fields_in_declaration_order(self):
        record = describe_record(ServerConfig)
        assert record.cls is ServerConfig
        assert record.name == "ServerConfig"
        assert record.field_names() == ["host", "port", "tls"]

    def test_types_and_tags(self):
        record = describe_record(ServerConfig)
        assert record.fields[0] == FieldSpec("host", str, "HOST,parser=nonempty-string,default=0.0.0.0")
        assert record.fields[1] == FieldSpec("port", int, "PORT,parser=int")
        assert record.fields[2] == FieldSpec("tls", TLSConfig, "")

    def test_string_annotations_are_resolved(self):
        record = describe_record(ForwardRefConfig)
        assert record.fields[0].type is TLSConfig

    def test_describing_does_not_touch_class(self):
        before = dataclasses.fields(ServerConfig)
        describe_record(ServerConfig)
        assert dataclasses.fields(ServerConfig) == before

    def test_non_dataclass_rejected(self):
        class Plain:
            value: str

        with pytest.raises(UnsupportedTypeError, match="does not describe a record type"):
            describe_record(Plain)

    def test_instance_rejected(self):
        with pytest.raises(UnsupportedTypeError, match="instance of ServerConfig"):
            describe_record(ServerConfig())  # type: ignore[arg-type]

    def test_description_is_immutable(self):
        record = describe_record(ServerConfig)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.fields = ()  # type: ignore[misc]


class TestEnvField:
    def test_tag_stored_in_metadata(self):
        f = dataclasses.fields(TLSConfig)[0]
        assert f.metadata[ENV_TAG_KEY] == "TLS_CERT,parser=possibly-empty-string"

    def test_field_without_default_is_not_in_init(self):
        f = dataclasses.fields(TLSConfig)[0]
        assert f.init is False
        TLSConfig()  # constructible with no arguments

    def test_unparsed_record_is_usable(self):
        fresh = TLSConfig()
        assert fresh.cert is None
        assert repr(fresh) == "TLSConfig(cert=None)"
        assert fresh == TLSConfig()

    def test_field_with_default_keeps_init(self):
        port = {f.name: f for f in dataclasses.fields(ServerConfig)}["port"]
        assert port.init is True
        assert ServerConfig(port=5).port == 5

    def test_extra_metadata_preserved(self):
        f = env_field("X,parser=int", metadata={"doc": "answer"})
        assert f.metadata == {"doc": "answer", ENV_TAG_KEY: "X,parser=int"}


class TestIsRecordType:
    def test_dataclass_type(self):
        assert is_record_type(ServerConfig)

    def test_dataclass_instance(self):
        assert not is_record_type(ServerConfig())

    def test_plain_types(self):
        assert not is_record_type(str)
        assert not is_record_type(list[str])


def test_hand_built_record_type():
    class Holder:
        pass

    record = RecordType(cls=Holder, fields=(FieldSpec("value", str, "VALUE,parser=nonempty-string"),))
    assert record.name.endswith("Holder")
    assert record.field_names() == ["value"]
