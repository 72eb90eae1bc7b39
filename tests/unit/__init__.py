"""
Unit Tests

Tests for individual components and functions:
- text_formatter.py: wrapping and drawtext escaping
- filter_graph.py: filter_complex construction
- composer.py: ffmpeg invocation and output publishing
- upload_store.py / filename_utils.py: staging and naming
"""
