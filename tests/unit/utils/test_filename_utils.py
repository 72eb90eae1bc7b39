"""
Unit tests for filename utilities.

Tests cover:
- Sanitizing client-supplied names
- Unique staging names
- Output name allocation (format, monotonic, collision skipping, threads)
"""
import re
import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from docvid.utils import filename_utils
from docvid.utils.filename_utils import (
    generate_output_filename,
    sanitize_filename,
    staged_upload_name,
)

OUTPUT_PATTERN = re.compile(r"^output_(\d+)\.mp4$")


class TestSanitizeFilename(unittest.TestCase):
    """Test cases for sanitize_filename."""

    def test_unsafe_characters_replaced(self):
        self.assertEqual(sanitize_filename('clip:final?.mp4'), 'clip_final_.mp4')
        self.assertEqual(sanitize_filename('a<b>c|d*e"f.png'), 'a_b_c_d_e_f.png')

    def test_path_separators_removed(self):
        result = sanitize_filename('../../etc/passwd')
        self.assertNotIn('/', result)
        self.assertEqual(result, '.._.._etc_passwd')
        self.assertNotIn('\\', sanitize_filename('..\\windows\\x.mp4'))

    def test_control_characters_dropped(self):
        self.assertEqual(sanitize_filename('clip\x00\x1f.mp4'), 'clip.mp4')

    def test_empty_and_dot_names(self):
        self.assertEqual(sanitize_filename(''), 'untitled')
        self.assertEqual(sanitize_filename('..'), 'untitled')
        self.assertEqual(sanitize_filename('   '), 'untitled')

    def test_truncation_keeps_extension(self):
        result = sanitize_filename('a' * 300 + '.mp4', max_length=50)
        self.assertEqual(len(result), 50)
        self.assertTrue(result.endswith('.mp4'))


class TestStagedUploadName(unittest.TestCase):
    """Test cases for staged_upload_name."""

    def test_format(self):
        name = staged_upload_name('my clip.mp4')
        self.assertRegex(name, r'^\d+_[0-9a-f]{8}_my clip\.mp4$')

    def test_unique_for_same_name(self):
        names = {staged_upload_name('clip.mp4') for _ in range(50)}
        self.assertEqual(len(names), 50)

    def test_missing_name(self):
        self.assertTrue(staged_upload_name(None).endswith('_untitled'))


class TestGenerateOutputFilename(unittest.TestCase):
    """Test cases for generate_output_filename."""

    def setUp(self):
        self.directory = Path(tempfile.mkdtemp(prefix="test_outputs_"))

    def tearDown(self):
        shutil.rmtree(self.directory, ignore_errors=True)

    def test_format(self):
        self.assertRegex(generate_output_filename(self.directory), OUTPUT_PATTERN)

    def test_same_millisecond_gives_distinct_names(self):
        with patch.object(filename_utils.time, 'time', return_value=1700000000.0):
            first = generate_output_filename(self.directory)
            second = generate_output_filename(self.directory)
        self.assertNotEqual(first, second)
        stamps = [int(OUTPUT_PATTERN.match(n).group(1)) for n in (first, second)]
        self.assertEqual(stamps[1], stamps[0] + 1)

    def test_skips_existing_files(self):
        with patch.object(filename_utils, '_last_output_ms', 0), \
                patch.object(filename_utils.time, 'time', return_value=1800000000.0):
            (self.directory / 'output_1800000000000.mp4').write_bytes(b'x')
            (self.directory / 'output_1800000000001.mp4.part').write_bytes(b'x')
            name = generate_output_filename(self.directory)
        self.assertEqual(name, 'output_1800000000002.mp4')

    def test_threads_receive_distinct_names(self):
        names = []
        lock = threading.Lock()

        def allocate():
            name = generate_output_filename(self.directory)
            with lock:
                names.append(name)

        threads = [threading.Thread(target=allocate) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(set(names)), 20)


if __name__ == '__main__':
    unittest.main()
