# -*- coding: utf-8 -*-
# Protocol buffer module for dag_pb.proto.
# The FileDescriptorProto is assembled from descriptor_pb2 instead of an
# embedded serialized blob; keep it in sync with dag_pb.proto.
"""Generated protocol buffer code."""
from google.protobuf import descriptor_pb2 as _descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
from google.protobuf.internal import builder as _builder

_sym_db = _symbol_database.Default()

_FIELD = _descriptor_pb2.FieldDescriptorProto


def _build_file_descriptor() -> bytes:
    file_proto = _descriptor_pb2.FileDescriptorProto(
        name="w3storage/car/pb/dag_pb.proto",
        package="w3storage.car.pb",
        syntax="proto2",
    )

    pb_link = file_proto.message_type.add(name="PBLink")
    pb_link.field.add(
        name="Hash", number=1, type=_FIELD.TYPE_BYTES, label=_FIELD.LABEL_OPTIONAL
    )
    pb_link.field.add(
        name="Name", number=2, type=_FIELD.TYPE_STRING, label=_FIELD.LABEL_OPTIONAL
    )
    pb_link.field.add(
        name="Tsize", number=3, type=_FIELD.TYPE_UINT64, label=_FIELD.LABEL_OPTIONAL
    )

    pb_node = file_proto.message_type.add(name="PBNode")
    pb_node.field.add(
        name="Links",
        number=2,
        type=_FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=".w3storage.car.pb.PBLink",
    )
    pb_node.field.add(
        name="Data", number=1, type=_FIELD.TYPE_BYTES, label=_FIELD.LABEL_OPTIONAL
    )

    return file_proto.SerializeToString()


DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(_build_file_descriptor())

_globals = globals()
_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, _globals)
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, "w3storage.car.pb.dag_pb_pb2", _globals)
