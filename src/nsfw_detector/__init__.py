"""NSFW image detection served over gRPC."""
