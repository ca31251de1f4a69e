"""Tests for the default recognizer, detector, rasterizer and encoder backends."""

import io
import re
import subprocess
from types import SimpleNamespace

import cv2
import numpy as np
import pytest
from PIL import Image

from idphotocrop.services.backends import (
    HaarCascadeDetector,
    ImageEncoder,
    PageRasterizer,
    PdftoppmRasterizer,
    PillowEncoder,
    RapidOCRRecognizer,
    RegionDetector,
    TextRecognizer,
    default_export_name,
    load_document,
)
from idphotocrop.services.backends.encoder import write_export
from idphotocrop.services.backends.recognizer import split_line
from idphotocrop.services.geometry import Rectangle
from idphotocrop.services.raster import RasterImage
from idphotocrop.utils.exceptions import InvalidInputError, RasterizationError

from conftest import FakeDetector, FakeRecognizer, make_rgba


def _png_bytes(width=30, height=20):
    buf = io.BytesIO()
    make_rgba(width, height).to_pil().save(buf, format="PNG")
    return buf.getvalue()


class TestProtocols:
    def test_default_backends_conform(self):
        assert isinstance(RapidOCRRecognizer(), TextRecognizer)
        assert isinstance(HaarCascadeDetector(), RegionDetector)
        assert isinstance(PdftoppmRasterizer(), PageRasterizer)
        assert isinstance(PillowEncoder(), ImageEncoder)

    def test_fakes_conform(self):
        assert isinstance(FakeRecognizer(), TextRecognizer)
        assert isinstance(FakeDetector(), RegionDetector)


class TestSplitLine:
    def test_words_share_line_confidence(self):
        words = split_line("AB CD", None, 0.9)
        assert [w.text for w in words] == ["AB", "CD"]
        assert all(w.confidence == pytest.approx(90.0) for w in words)
        assert all(w.bounding_box is None for w in words)

    def test_boxes_proportional_to_characters(self):
        box = [[0, 0], [100, 0], [100, 10], [0, 10]]
        first, second = split_line("AB CD", box, 0.5)
        assert first.bounding_box == Rectangle(0, 0, 40, 10)
        assert second.bounding_box == Rectangle(60, 0, 40, 10)

    def test_confidence_clamped(self):
        assert split_line("x", None, 1.7)[0].confidence == 100.0

    def test_blank_line(self):
        assert split_line("   ", None, 0.9) == []


class TestRapidOCRRecognizer:
    def test_maps_engine_output(self):
        boxes = np.array(
            [
                [[0, 0], [100, 0], [100, 10], [0, 10]],
                [[0, 20], [50, 20], [50, 30], [0, 30]],
            ],
            dtype=np.float32,
        )
        output = SimpleNamespace(txts=("JOHN SMITH", "1985"), scores=(0.92, 0.4), boxes=boxes)
        recognizer = RapidOCRRecognizer()
        seen = []
        recognizer._engines["EN"] = lambda img: seen.append(img.shape) or output

        result = recognizer.recognize(RasterImage.blank(60, 40), "eng")
        assert seen == [(40, 60, 3)]
        assert result.full_text == "JOHN SMITH\n1985"
        assert [w.text for w in result.words] == ["JOHN", "SMITH", "1985"]
        assert result.words[0].confidence == pytest.approx(92.0)
        assert result.words[2].confidence == pytest.approx(40.0)

    def test_empty_output(self):
        recognizer = RapidOCRRecognizer()
        recognizer._engines["EN"] = lambda img: SimpleNamespace(txts=None, scores=None, boxes=None)
        result = recognizer.recognize(RasterImage(np.zeros((10, 10), dtype=np.uint8)), "en")
        assert result.full_text == ""
        assert result.words == []


class TestHaarCascadeDetector:
    def test_blank_page_has_no_faces(self):
        assert HaarCascadeDetector().detect(RasterImage.blank(200, 200)) == []

    def test_tiny_image_skips_classifier(self):
        detector = HaarCascadeDetector(cascade_path="/nonexistent/cascade.xml")
        assert detector.detect(RasterImage.blank(10, 10)) == []

    def test_missing_cascade_raises(self):
        detector = HaarCascadeDetector(cascade_path="/nonexistent/cascade.xml")
        with pytest.raises((RuntimeError, cv2.error)):
            detector.detect(RasterImage.blank(100, 100))


class TestPdftoppmRasterizer:
    def test_missing_binary(self):
        rasterizer = PdftoppmRasterizer(binary="idphotocrop-no-such-binary")
        with pytest.raises(RasterizationError):
            rasterizer.render(b"%PDF-1.4", 0, 3.0)

    def test_renders_first_page_at_scale(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout=_png_bytes(), stderr=b"")

        monkeypatch.setattr(subprocess, "run", fake_run)
        image = PdftoppmRasterizer().render(b"%PDF-1.4", 0, 3.0)
        assert image.size == (30, 20)
        cmd = calls[0]
        assert cmd[cmd.index("-r") + 1] == "216"
        assert cmd[cmd.index("-f") + 1] == "1"
        assert cmd[cmd.index("-l") + 1] == "1"

    def test_failure_reports_stderr(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout=b"", stderr=b"Syntax Error")

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(RasterizationError, match="Syntax Error"):
            PdftoppmRasterizer().render(b"garbage", 0, 3.0)


class TestLoadDocument:
    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "scan.gif"
        path.write_bytes(b"GIF89a")
        with pytest.raises(InvalidInputError):
            load_document(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidInputError):
            load_document(tmp_path / "nothing.png")

    def test_decodes_image(self, tmp_path):
        path = tmp_path / "scan.PNG"
        path.write_bytes(_png_bytes(30, 20))
        image = load_document(path)
        assert image.size == (30, 20)
        assert not image.is_grayscale

    def test_corrupt_image(self, tmp_path):
        path = tmp_path / "scan.jpg"
        path.write_bytes(b"not a jpeg")
        with pytest.raises(InvalidInputError):
            load_document(path)

    def test_pdf_uses_rasterizer(self, tmp_path):
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF-1.4 test")
        seen = []

        class Rasterizer:
            def render(self, file_bytes, page_index, scale):
                seen.append((file_bytes, page_index, scale))
                return RasterImage.blank(8, 8)

        assert load_document(path, Rasterizer()).size == (8, 8)
        assert seen == [(b"%PDF-1.4 test", 0, 3.0)]


class TestPillowEncoder:
    def test_png(self, rgba_image):
        data = PillowEncoder().encode(rgba_image)
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "PNG"
            assert RasterImage.from_pil(img) == rgba_image

    def test_jpg_drops_alpha(self, rgba_image):
        data = PillowEncoder().encode(rgba_image, "jpg")
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"

    def test_default_export_name(self):
        assert re.fullmatch(r"extracted_photo_\d+\.png", default_export_name())

    def test_write_export_creates_folders(self, tmp_path):
        target = tmp_path / "a" / "b" / "photo.png"
        assert write_export(b"data", target) == str(target)
        assert target.read_bytes() == b"data"
