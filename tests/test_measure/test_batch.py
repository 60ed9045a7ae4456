"""Tests for BatchPipeline — end-to-end quantification."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile

from pixiquant.core.config import PipelineConfig
from pixiquant.core.exceptions import (
    DecodeError,
    ImageProcessingError,
    InvalidCropFractionError,
    InvalidImageFormatError,
)
from pixiquant.core.models import BatchResult, ImageBuffer
from pixiquant.measure.batch import BatchPipeline


def _plate_files(plate_dir: Path) -> list[Path]:
    return sorted(plate_dir.glob("*.tif"))


def _reader_for(images: dict[str, np.ndarray]):
    def read(path: Path) -> ImageBuffer:
        return ImageBuffer(images[Path(path).name], source=Path(path))

    return read


class TestScenario:
    def test_bright_square_scene(self, scene, make_scene, processing_date):
        """Background maps to zero-ish pixels and the square dominates the total."""
        images = {
            "scene_B7.tif": scene,
            "blank_B8.tif": make_scene(square_value=None),
        }
        pipeline = BatchPipeline(processing_date=processing_date, reader=_reader_for(images))
        with_square, without_square = pipeline.run(
            [Path("scene_B7.tif"), Path("blank_B8.tif")], sigma=10, crop_fraction=0.05,
        )

        assert with_square.count_black_pixels > 0
        assert with_square.total_intensity > without_square.total_intensity
        assert with_square.total_pixels_in_image == 90 * 90

    def test_scene_from_tiff(self, tmp_path, scene, processing_date):
        path = tmp_path / "Bright Field_B7_1_001.tif"
        tifffile.imwrite(str(path), scene.astype(np.float32))

        (record,) = BatchPipeline(processing_date=processing_date).run([path])
        assert record.filename == path.name
        assert record.well == "B07"
        assert record.directory == tmp_path.name
        assert record.date == "2026-10-19"
        assert record.crop == 0.05
        assert record.sigma_gblur == 10.0
        assert record.count_black_pixels > 0
        assert record.non_black_pixels + record.count_black_pixels == record.total_pixels_in_image

    def test_multi_frame_matches_single_frame(self, tmp_path, scene, stack, processing_date):
        single = tmp_path / "single_A1.tif"
        multi = tmp_path / "multi_A1.tif"
        tifffile.imwrite(str(single), scene)
        tifffile.imwrite(str(multi), stack.pixels)

        a, b = BatchPipeline(processing_date=processing_date).run([single, multi])
        assert b.total_intensity == pytest.approx(a.total_intensity, rel=1e-12)
        assert b.count_black_pixels == a.count_black_pixels


class TestBatchPipeline:
    def test_records_for_every_image(self, plate_dir, processing_date):
        result = BatchPipeline(processing_date=processing_date).execute(_plate_files(plate_dir))

        assert isinstance(result, BatchResult)
        assert [r.well for r in result.records] == ["A01", "B07", "D12"]
        for rec in result.records:
            assert rec.total_pixels_in_image == 58 * 58
            assert rec.non_black_pixels + rec.count_black_pixels == rec.total_pixels_in_image
            assert rec.directory == "data"
        assert result.skipped == []
        assert result.elapsed_seconds >= 0

    def test_input_order_preserved(self, plate_dir, processing_date):
        files = list(reversed(_plate_files(plate_dir)))
        records = BatchPipeline(processing_date=processing_date).run(files)
        assert [r.filename for r in records] == [f.name for f in files]

    def test_rerun_is_identical(self, plate_dir, processing_date):
        pipeline = BatchPipeline(processing_date=processing_date)
        first = pipeline.run(_plate_files(plate_dir))
        second = pipeline.run(_plate_files(plate_dir))
        assert first == second

    def test_parameters_override_config(self, plate_dir, processing_date):
        pipeline = BatchPipeline(PipelineConfig(sigma=4.0, crop_fraction=0.1), processing_date)
        default = pipeline.run(_plate_files(plate_dir))[0]
        custom = pipeline.run(_plate_files(plate_dir), sigma=8.0, crop_fraction=0.0)[0]

        assert default.sigma_gblur == 4.0
        assert default.total_pixels_in_image == 52 * 52
        assert custom.sigma_gblur == 8.0
        assert custom.crop == 0.0
        assert custom.total_pixels_in_image == 64 * 64

    def test_custom_well_token(self, tmp_path, scene, processing_date):
        config = PipelineConfig(well_position=1, well_delimiter="-")
        images = {"C5-site1.tif": scene}
        (record,) = BatchPipeline(config, processing_date, reader=_reader_for(images)).run(
            [tmp_path / "C5-site1.tif"]
        )
        assert record.well == "C05"

    def test_missing_well_warns(self, tmp_path, scene, processing_date):
        images = {"plain.tif": scene}
        result = BatchPipeline(processing_date=processing_date, reader=_reader_for(images)).execute(
            [tmp_path / "plain.tif"]
        )
        assert result.records[0].well is None
        assert any("no well name" in w for w in result.warnings)

    def test_progress_callback(self, plate_dir, processing_date):
        calls: list[tuple[int, int, str]] = []

        def callback(current: int, total: int, name: str) -> None:
            calls.append((current, total, name))

        BatchPipeline(processing_date=processing_date).execute(
            _plate_files(plate_dir), progress_callback=callback,
        )
        assert [c[0] for c in calls] == [1, 2, 3]
        assert all(c[1] == 3 for c in calls)
        assert calls[0][2] == "Bright Field_A1_1_001.tif"

    def test_no_images_raises(self):
        with pytest.raises(ValueError, match="No images"):
            BatchPipeline().run([])

    def test_invalid_crop_checked_before_reading(self, tmp_path):
        def reader(path: Path) -> ImageBuffer:
            raise AssertionError("image should not be read")

        with pytest.raises(InvalidCropFractionError):
            BatchPipeline(reader=reader).run([tmp_path / "a_B1.tif"], crop_fraction=0.5)

    def test_invalid_sigma(self, tmp_path):
        with pytest.raises(ValueError, match="sigma"):
            BatchPipeline().run([tmp_path / "a_B1.tif"], sigma=0)


class TestFailurePolicy:
    def test_abort_names_file_and_stage(self, plate_dir, corrupt_tiff):
        with pytest.raises(ImageProcessingError) as info:
            BatchPipeline().run(_plate_files(plate_dir))

        assert info.value.stage == "decode"
        assert info.value.path == str(corrupt_tiff)
        assert isinstance(info.value.__cause__, DecodeError)

    def test_skip_omits_failed_image(self, plate_dir, corrupt_tiff, processing_date):
        pipeline = BatchPipeline(PipelineConfig(on_error="skip"), processing_date)
        result = pipeline.execute(_plate_files(plate_dir))

        assert [r.well for r in result.records] == ["A01", "B07", "D12"]
        assert len(result.skipped) == 1
        assert result.skipped[0].filename == corrupt_tiff.name
        assert result.skipped[0].stage == "decode"
        assert any(corrupt_tiff.name in w for w in result.warnings)

    def test_correct_stage_failure(self, tmp_path):
        bad = np.zeros((20, 20))
        bad[0, 0] = np.inf
        pipeline = BatchPipeline(reader=_reader_for({"bad_A1.tif": bad}))
        with pytest.raises(ImageProcessingError) as info:
            pipeline.run([tmp_path / "bad_A1.tif"])
        assert info.value.stage == "correct"
        assert isinstance(info.value.__cause__, InvalidImageFormatError)

    def test_crop_stage_failure(self, tmp_path):
        pipeline = BatchPipeline(reader=_reader_for({"tiny_A1.tif": np.ones((2, 2))}))
        with pytest.raises(ImageProcessingError) as info:
            pipeline.run([tmp_path / "tiny_A1.tif"], crop_fraction=0.3)
        assert info.value.stage == "crop"


class TestParallel:
    def test_workers_match_serial(self, plate_dir, processing_date):
        files = _plate_files(plate_dir)
        serial = BatchPipeline(processing_date=processing_date).run(files)
        parallel = BatchPipeline(PipelineConfig(workers=2), processing_date).run(files)
        assert parallel == serial

    def test_workers_skip_policy(self, plate_dir, corrupt_tiff, processing_date):
        config = PipelineConfig(workers=2, on_error="skip")
        result = BatchPipeline(config, processing_date).execute(_plate_files(plate_dir))
        assert len(result.records) == 3
        assert result.skipped[0].filename == corrupt_tiff.name

    def test_workers_abort_policy(self, plate_dir, corrupt_tiff):
        with pytest.raises(ImageProcessingError) as info:
            BatchPipeline(PipelineConfig(workers=2)).run(_plate_files(plate_dir))
        assert info.value.stage == "decode"
