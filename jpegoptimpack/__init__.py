"""JpegOptimPack internals: resolver, launcher and duplex stream adapter."""
