# -*- coding: utf-8 -*-
# Generated by the protocol buffer compiler.  DO NOT EDIT!
# source: nsfw_detector.proto
"""Generated protocol buffer code."""
from google.protobuf.internal import builder as _builder
from google.protobuf import descriptor as _descriptor
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
# @@protoc_insertion_point(imports)

_sym_db = _symbol_database.Default()




DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(b'\n\x13nsfw_detector.proto\x12\x15nsfw_detector_service\"e\n\x14NsfwDetectionRequest\x12\x12\n\nrequest_id\x18\x01 \x01(\t\x12\x14\n\nimage_data\x18\x02 \x01(\x0cH\x00\x12\x13\n\timage_url\x18\x03 \x01(\tH\x00\x42\x0e\n\x0cimage_source\"Z\n\x0e\x44\x65tectionScore\x12\x39\n\x05label\x18\x01 \x01(\x0e\x32*.nsfw_detector_service.ClassificationLabel\x12\r\n\x05score\x18\x02 \x01(\x02\"\xdc\x01\n\x15NsfwDetectionResponse\x12\x12\n\nrequest_id\x18\x01 \x01(\t\x12J\n\x16overall_classification\x18\x02 \x01(\x0e\x32*.nsfw_detector_service.ClassificationLabel\x12\x35\n\x06scores\x18\x03 \x03(\x0b\x32%.nsfw_detector_service.DetectionScore\x12\x15\n\rmodel_version\x18\x04 \x01(\t\x12\x15\n\rerror_message\x18\x05 \x01(\t*y\n\x13\x43lassificationLabel\x12 \n\x1c\x43LASSIFICATION_LABEL_UNKNOWN\x10\x00\x12\x1f\n\x1b\x43LASSIFICATION_LABEL_NORMAL\x10\x01\x12\x1f\n\x1b\x43LASSIFICATION_LABEL_UNSAFE\x10\x02\x32w\n\x0cNsfwDetector\x12g\n\nDetectNsfw\x12+.nsfw_detector_service.NsfwDetectionRequest\x1a,.nsfw_detector_service.NsfwDetectionResponseb\x06proto3')

_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, globals())
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, 'nsfw_detector_pb2', globals())
if _descriptor._USE_C_DESCRIPTORS == False:

  DESCRIPTOR._options = None
  _CLASSIFICATIONLABEL._serialized_start=464
  _CLASSIFICATIONLABEL._serialized_end=585
  _NSFWDETECTIONREQUEST._serialized_start=46
  _NSFWDETECTIONREQUEST._serialized_end=147
  _DETECTIONSCORE._serialized_start=149
  _DETECTIONSCORE._serialized_end=239
  _NSFWDETECTIONRESPONSE._serialized_start=242
  _NSFWDETECTIONRESPONSE._serialized_end=462
  _NSFWDETECTOR._serialized_start=587
  _NSFWDETECTOR._serialized_end=706
# @@protoc_insertion_point(module_scope)
