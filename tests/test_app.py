import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from mutagen.flac import FLAC
from PIL import Image

from flac_cover.app import CoverEmbedder, PictureSummary
from flac_cover.config import EmbedSettings, OutputSettings, Settings
from flac_cover.errors import (
    ImageDecodeFailure,
    IOFailure,
    NotContainerFile,
    PictureAlreadyPresent,
    TruncatedBlock,
)
from flac_cover.scanner import scan_blocks

from tests.helpers import minimal_flac, typical_flac


class TestCoverEmbedder(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.cover = self.tmp / "cover.jpg"
        Image.new("RGB", (100, 200), (10, 120, 200)).save(self.cover, "JPEG")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, data: bytes) -> Path:
        path = self.tmp / name
        path.write_bytes(data)
        return path

    def test_embed_writes_sibling_and_verifies(self) -> None:
        source = self._write("track.flac", typical_flac())
        report = CoverEmbedder.create().embed(source, self.cover)
        self.assertEqual(report.output, self.tmp / "track_cover.flac")
        self.assertFalse(report.had_picture)
        self.assertTrue(report.verified)
        out = report.output.read_bytes()
        self.assertEqual(len(out), len(source.read_bytes()) + report.picture_length)
        scan = scan_blocks(out)
        self.assertTrue(scan.complete)
        self.assertTrue(scan.has_picture)

        pictures = FLAC(report.output).pictures
        self.assertEqual(len(pictures), 1)
        pic = pictures[0]
        self.assertEqual(pic.type, 3)
        self.assertEqual(pic.mime, "image/jpeg")
        self.assertEqual(pic.desc, "Cover Image")
        self.assertEqual((pic.width, pic.height, pic.depth, pic.colors), (100, 200, 24, 0))
        self.assertEqual(pic.data, self.cover.read_bytes())

    def test_embed_into_streaminfo_only_file(self) -> None:
        source = self._write("bare.flac", minimal_flac())
        out = self.tmp / "explicit.flac"
        report = CoverEmbedder.create().embed(source, self.cover, output=out)
        self.assertEqual(report.output, out)
        self.assertTrue(report.verified)
        blocks = scan_blocks(out.read_bytes()).blocks
        self.assertEqual([b.header.is_last for b in blocks], [False, True])

    def test_existing_picture_is_duplicated_by_default(self) -> None:
        source = self._write("track.flac", typical_flac())
        embedder = CoverEmbedder.create()
        first = embedder.embed(source, self.cover)
        with self.assertLogs("flac_cover.app", level="WARNING"):
            second = embedder.embed(first.output, self.cover)
        self.assertTrue(second.had_picture)
        self.assertEqual(len(FLAC(second.output).pictures), 2)
        self.assertEqual(len(embedder.verify(second.output)), 2)

    def test_skip_if_present(self) -> None:
        source = self._write("track.flac", typical_flac())
        first = CoverEmbedder.create().embed(source, self.cover)
        strict = CoverEmbedder.create(Settings(embed=EmbedSettings(skip_if_present=True)))
        with self.assertRaises(PictureAlreadyPresent):
            strict.embed(first.output, self.cover, output=self.tmp / "again.flac")
        self.assertFalse((self.tmp / "again.flac").exists())

    def test_existing_output_requires_overwrite(self) -> None:
        source = self._write("track.flac", typical_flac())
        embedder = CoverEmbedder.create()
        embedder.embed(source, self.cover)
        with self.assertRaises(IOFailure):
            embedder.embed(source, self.cover)
        report = embedder.embed(source, self.cover, overwrite=True)
        self.assertEqual(len(FLAC(report.output).pictures), 1)

        permissive = CoverEmbedder.create(Settings(output=OutputSettings(overwrite=True)))
        permissive.embed(source, self.cover)

    def test_refuses_to_overwrite_input(self) -> None:
        source = self._write("track.flac", typical_flac())
        with self.assertRaises(IOFailure):
            CoverEmbedder.create().embed(source, self.cover, output=source, overwrite=True)
        self.assertEqual(source.read_bytes(), typical_flac())

    def test_truncated_input_writes_nothing(self) -> None:
        source = self._write("broken.flac", typical_flac()[:60])
        with self.assertRaises(TruncatedBlock):
            CoverEmbedder.create().embed(source, self.cover)
        self.assertFalse((self.tmp / "broken_cover.flac").exists())

    def test_not_a_flac_file(self) -> None:
        source = self._write("song.mp3", b"ID3\x04" + b"\x00" * 64)
        with self.assertRaises(NotContainerFile):
            CoverEmbedder.create().embed(source, self.cover)

    def test_bad_image_writes_nothing(self) -> None:
        source = self._write("track.flac", typical_flac())
        bogus = self._write("cover.jpg.txt", b"not an image")
        with self.assertRaises(ImageDecodeFailure):
            CoverEmbedder.create().embed(source, bogus)
        self.assertFalse((self.tmp / "track_cover.flac").exists())

    def test_verification_can_be_disabled(self) -> None:
        source = self._write("track.flac", typical_flac())
        embedder = CoverEmbedder.create(Settings(embed=EmbedSettings(verify_output=False)))
        self.assertIsNone(embedder.embed(source, self.cover).verified)

    def test_same_sized_foreign_picture_does_not_verify(self) -> None:
        source = self._write("track.flac", typical_flac())
        size = len(self.cover.read_bytes())
        lookalike = PictureSummary(
            picture_type=3,
            mime_type="image/jpeg",
            description="Cover Image",
            width=100,
            height=200,
            color_depth=24,
            colors_used=0,
            size=size,
            data=b"\x00" * size,
        )
        with patch.object(CoverEmbedder, "verify", return_value=[lookalike]):
            with self.assertLogs("flac_cover.app", level="WARNING"):
                report = CoverEmbedder.create().embed(source, self.cover)
        self.assertFalse(report.verified)

    def test_verify_returns_picture_bytes(self) -> None:
        source = self._write("track.flac", typical_flac())
        embedder = CoverEmbedder.create()
        report = embedder.embed(source, self.cover)
        (summary,) = embedder.verify(report.output)
        self.assertEqual(summary.data, self.cover.read_bytes())
        self.assertEqual(summary.size, len(summary.data))

    def test_inspect(self) -> None:
        source = self._write("track.flac", typical_flac())
        result = CoverEmbedder.create().inspect(source)
        self.assertEqual(len(result.blocks), 3)
        self.assertFalse(result.has_picture)

    def test_verify_rejects_non_flac(self) -> None:
        bogus = self._write("x.flac", b"\x00" * 64)
        with self.assertRaises(IOFailure):
            CoverEmbedder.create().verify(bogus)


if __name__ == "__main__":
    unittest.main()
