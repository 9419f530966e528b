"""Document codecs, file stores and record repositories."""
