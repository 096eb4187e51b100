import base64
import io
import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch, MagicMock

import requests
from PIL import Image

from interior_ai.errors import ImageIngestionError
from interior_ai.image_ingestion import (
    ingest_upload,
    fetch_sample_image,
    strip_data_url_prefix,
    decode_data_url,
    sniff_media_type,
    to_data_url,
    SampleLoader,
    NOT_AN_IMAGE_MESSAGE,
    SAMPLE_FAILED_MESSAGE,
)


def _png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 180, 150)).save(buffer, format="PNG")
    return buffer.getvalue()


def _response(content, content_type=None, status_error=None):
    response = MagicMock()
    response.content = content
    response.headers = {"Content-Type": content_type} if content_type else {}
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestUploadIngestion(unittest.TestCase):

    def test_image_upload_produces_both_encodings(self):
        data = b"\xff\xd8\xff\xe0fake-jpeg"
        image = ingest_upload("room.jpg", "image/jpeg", data)

        self.assertEqual(image.data_url, "data:image/jpeg;base64," + base64.b64encode(data).decode())
        self.assertEqual(image.preview, data)
        self.assertEqual(image.media_type, "image/jpeg")
        self.assertEqual(image.source, "room.jpg")
        # Both encodings resolve to the same content
        self.assertEqual(decode_data_url(image.data_url), image.preview)

    def test_non_image_media_type_is_rejected(self):
        for media_type in ("application/pdf", "text/plain", "", None):
            with self.assertRaises(ImageIngestionError) as ctx:
                ingest_upload("notes.pdf", media_type, b"%PDF-1.4")
            self.assertEqual(str(ctx.exception), NOT_AN_IMAGE_MESSAGE)

    def test_empty_file_is_rejected(self):
        with self.assertRaises(ImageIngestionError):
            ingest_upload("empty.png", "image/png", b"")


class TestDataUrlHelpers(unittest.TestCase):

    def test_strip_prefix(self):
        self.assertEqual(strip_data_url_prefix("data:image/png;base64,QUJD"), "QUJD")
        self.assertEqual(strip_data_url_prefix("data:image/webp;base64, QUJD "), "QUJD")
        self.assertEqual(strip_data_url_prefix("QUJD"), "QUJD")
        self.assertEqual(strip_data_url_prefix(""), "")

    def test_to_data_url(self):
        self.assertEqual(to_data_url(b"ABC", "image/png"), "data:image/png;base64,QUJD")

    def test_sniff_media_type(self):
        self.assertEqual(sniff_media_type(_png_bytes()), "image/png")
        self.assertIsNone(sniff_media_type(b"definitely not an image"))


class TestSampleFetch(unittest.TestCase):

    @patch('interior_ai.image_ingestion.requests.get')
    def test_sample_uses_remote_url_as_preview(self, mock_get):
        data = _png_bytes()
        mock_get.return_value = _response(data, "image/png")

        image = fetch_sample_image("https://example.com/room.png")

        self.assertEqual(image.preview, "https://example.com/room.png")
        self.assertEqual(image.media_type, "image/png")
        self.assertEqual(decode_data_url(image.data_url), data)

    @patch('interior_ai.image_ingestion.requests.get')
    def test_missing_content_type_is_sniffed(self, mock_get):
        mock_get.return_value = _response(_png_bytes(), "application/octet-stream")
        image = fetch_sample_image("https://example.com/room")
        self.assertEqual(image.media_type, "image/png")
        self.assertTrue(image.data_url.startswith("data:image/png;base64,"))

    @patch('interior_ai.image_ingestion.requests.get')
    def test_network_failure_raises_user_message(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(ImageIngestionError) as ctx:
            fetch_sample_image("https://example.com/room.jpg")
        self.assertEqual(str(ctx.exception), SAMPLE_FAILED_MESSAGE)

    @patch('interior_ai.image_ingestion.requests.get')
    def test_http_error_raises(self, mock_get):
        mock_get.return_value = _response(b"", status_error=requests.HTTPError("404"))
        with self.assertRaises(ImageIngestionError):
            fetch_sample_image("https://example.com/missing.jpg")

    @patch('interior_ai.image_ingestion.requests.get')
    def test_non_image_content_raises(self, mock_get):
        mock_get.return_value = _response(b"<html></html>", "text/html")
        with self.assertRaises(ImageIngestionError):
            fetch_sample_image("https://example.com/page")


class TestSampleLoader(unittest.TestCase):

    def setUp(self):
        self.samples = [{"url": f"https://example.com/{i}.jpg", "label": str(i)} for i in range(3)]
        self.executor = ThreadPoolExecutor(max_workers=1)
        self.addCleanup(self.executor.shutdown, wait=True)

    def _collect(self, loader, timeout=5.0):
        deadline = time.monotonic() + timeout
        while loader.is_loading and time.monotonic() < deadline:
            result = loader.collect()
            if result is not None:
                return result
            time.sleep(0.01)
        return loader.collect()

    def test_slot_is_held_until_download_is_collected(self):
        release = threading.Event()

        def fetch(url):
            release.wait(5)
            return "image"

        loader = SampleLoader(self.samples, fetch=fetch)
        self.assertTrue(loader.start(1, self.executor))

        # Still loading on the next page run
        self.assertTrue(loader.is_loading)
        self.assertEqual(loader.loading_index, 1)
        self.assertIsNone(loader.collect())
        self.assertTrue(loader.is_loading)

        release.set()
        self.assertEqual(self._collect(loader), "image")
        self.assertFalse(loader.is_loading)
        self.assertIsNone(loader.loading_index)

    def test_fetches_the_sample_url(self):
        fetch = MagicMock(return_value="image")
        loader = SampleLoader(self.samples, fetch=fetch)

        loader.start(2, self.executor)

        self.assertEqual(self._collect(loader), "image")
        fetch.assert_called_once_with("https://example.com/2.jpg")

    def test_only_one_sample_loads_at_a_time(self):
        release = threading.Event()
        fetch = MagicMock(side_effect=lambda url: release.wait(5) and url)
        loader = SampleLoader(self.samples, fetch=fetch)

        self.assertTrue(loader.start(0, self.executor))
        self.assertFalse(loader.start(2, self.executor))
        self.assertEqual(loader.loading_index, 0)

        release.set()
        self.assertEqual(self._collect(loader), "https://example.com/0.jpg")
        self.assertEqual(fetch.call_count, 1)
        self.assertTrue(loader.start(2, self.executor))

    def test_failed_fetch_releases_slot(self):
        fetch = MagicMock(side_effect=ImageIngestionError(SAMPLE_FAILED_MESSAGE))
        loader = SampleLoader(self.samples, fetch=fetch)
        loader.start(0, self.executor)

        with self.assertRaises(ImageIngestionError) as ctx:
            self._collect(loader)
        self.assertEqual(str(ctx.exception), SAMPLE_FAILED_MESSAGE)
        self.assertIsNone(loader.loading_index)

    def test_unexpected_fetch_error_becomes_user_message(self):
        loader = SampleLoader(self.samples, fetch=MagicMock(side_effect=RuntimeError("boom")))
        loader.start(0, self.executor)

        with self.assertRaises(ImageIngestionError) as ctx:
            self._collect(loader)
        self.assertEqual(str(ctx.exception), SAMPLE_FAILED_MESSAGE)
        self.assertFalse(loader.is_loading)

    def test_nothing_to_collect_when_idle(self):
        loader = SampleLoader(self.samples, fetch=MagicMock())
        self.assertIsNone(loader.collect())

    def test_unknown_index(self):
        loader = SampleLoader(self.samples, fetch=MagicMock())
        with self.assertRaises(IndexError):
            loader.start(5, self.executor)
        self.assertFalse(loader.is_loading)



if __name__ == '__main__':
    unittest.main()
