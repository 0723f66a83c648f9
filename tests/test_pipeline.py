"""End-to-end tests for the conversion pipeline."""

from pathlib import Path
from unittest.mock import patch

import h5py
import numpy as np
import pytest

from telemetry_h5.config import ConverterConfig, LayoutConfig, LayoutMode, OutputConfig
from telemetry_h5.etl import ConversionPipeline, run_conversion
from telemetry_h5.ingestion import InputError
from telemetry_h5.storage import StoreError


@pytest.fixture
def grouped_config() -> ConverterConfig:
    """Config selecting the grouped layout."""
    return ConverterConfig(layout=LayoutConfig(mode=LayoutMode.GROUPED))


def _attr_str(value: object) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


class TestFlatLayout:
    """Tests for the default flat layout."""

    def test_result_counts(self, input_file: Path, tmp_path: Path) -> None:
        """Test the summary returned by the pipeline."""
        result = run_conversion(input_file, tmp_path / "out.h5")

        assert result.layout == LayoutMode.FLAT
        assert result.n_namespaces == 2
        assert result.n_records == 7
        assert result.n_written == 6
        assert result.n_skipped == 1
        assert result.n_renamed == 2
        assert result.n_coercion_warnings == 0
        assert result.compression_level == 9

    def test_datasets_at_root(self, input_file: Path, tmp_path: Path) -> None:
        """Test that every non-empty record is a root-level dataset."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            assert sorted(f.keys()) == [
                "can.speed",
                "s3p.activity",
                "s3p.ignition",
                "x",
                "x_1",
                "x_2",
            ]
            assert all(isinstance(f[name], h5py.Dataset) for name in f)

    def test_activity_dataset(self, input_file: Path, tmp_path: Path) -> None:
        """Test values, dtype, chunking, compression and attributes."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            dset = f["s3p.activity"]
            assert dset.dtype == np.float64
            assert dset.shape == (2, 2)
            assert dset.chunks == (2, 1)
            assert dset.compression == "gzip"
            assert dset.compression_opts == 9
            np.testing.assert_array_equal(dset[...], [[2.0, 0.0], [1.0, 1.0]])

            attrs = dset.attrs
            assert _attr_str(attrs["l_vehicle"]) == "TRK-042"
            assert _attr_str(attrs["l_driver"]) == "D1"
            assert int(attrs["a_slot"]) == 1
            assert int(attrs["a_state_D"]) == 7
            assert int(attrs["a_state_a"]) == 2
            assert int(attrs["la"]) == 3
            assert "original_name" not in attrs

    def test_renamed_duplicates(self, input_file: Path, tmp_path: Path) -> None:
        """Test x, x_1, x_2 with original_name on the renamed ones."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            assert "original_name" not in f["x"].attrs
            assert _attr_str(f["x_1"].attrs["original_name"]) == "x"
            assert _attr_str(f["x_2"].attrs["original_name"]) == "x"
            np.testing.assert_array_equal(f["x"][...], [[1.0, 1.5]])
            np.testing.assert_array_equal(f["x_2"][...], [[3.0, 3.5]])

    def test_empty_record_skipped(self, input_file: Path, tmp_path: Path) -> None:
        """Test that a record with an empty matrix leaves no trace."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            assert "empty" not in f

    def test_ragged_rows_padded(self, input_file: Path, tmp_path: Path) -> None:
        """Test zero padding of a short row in the stored data."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            np.testing.assert_array_equal(
                f["can.speed"][...], [[2.0, 90.0, 0.0], [1.0, 88.5, 1.0]]
            )

    def test_uncompressed_level_zero(self, input_file: Path, tmp_path: Path) -> None:
        """Test that level 0 writes chunked but uncompressed datasets."""
        output = tmp_path / "out.h5"
        config = ConverterConfig(layout=LayoutConfig(compression_level=0))
        run_conversion(input_file, output, config)

        with h5py.File(output, "r") as f:
            assert f["s3p.ignition"].compression is None
            assert f["s3p.ignition"].chunks == (3, 1)

    def test_gzip_unavailable_falls_back(self, input_file: Path, tmp_path: Path) -> None:
        """Test that a missing deflate filter only downgrades compression."""
        output = tmp_path / "out.h5"
        with patch("telemetry_h5.storage.writer.gzip_available", return_value=False):
            result = run_conversion(input_file, output)

        assert result.n_written == 6
        assert result.n_compression_fallbacks == 6
        with h5py.File(output, "r") as f:
            assert f["s3p.activity"].compression is None

    def test_cross_namespace_collision(self, write_json, tmp_path: Path) -> None:
        """Test that the same name in two namespaces collides at the root."""
        input_path = write_json([[{"c": "x", "v": [[1]]}], [{"c": "x", "v": [[2]]}]])
        with pytest.raises(StoreError, match="create dataset 'x'"):
            run_conversion(input_path, tmp_path / "out.h5")

    def test_output_overwritten(self, input_file: Path, tmp_path: Path) -> None:
        """Test that an existing output file is truncated."""
        output = tmp_path / "out.h5"
        with h5py.File(output, "w") as f:
            f.create_dataset("stale", data=[1.0])

        run_conversion(input_file, output)

        with h5py.File(output, "r") as f:
            assert "stale" not in f


class TestGroupedLayout:
    """Tests for the grouped layout."""

    def test_structure(
        self, input_file: Path, tmp_path: Path, grouped_config: ConverterConfig
    ) -> None:
        """Test one group per namespace and one subgroup per record."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output, grouped_config)

        with h5py.File(output, "r") as f:
            assert sorted(f.keys()) == ["dataset_0", "dataset_1"]
            assert sorted(f["dataset_0"].keys()) == ["s3p.activity", "x", "x_1", "x_2"]
            assert sorted(f["dataset_1"].keys()) == ["can.speed", "s3p.ignition"]

    def test_values_fixed_width(
        self, input_file: Path, tmp_path: Path, grouped_config: ConverterConfig
    ) -> None:
        """Test that values keep the first two columns, uncompressed."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output, grouped_config)

        with h5py.File(output, "r") as f:
            values = f["dataset_1/can.speed/values"]
            assert values.shape == (2, 2)
            assert values.compression is None
            np.testing.assert_array_equal(values[...], [[2.0, 90.0], [1.0, 88.5]])

    def test_single_column_padded(
        self, write_json, tmp_path: Path, grouped_config: ConverterConfig
    ) -> None:
        """Test that a one-column matrix is padded to two columns."""
        input_path = write_json([[{"c": "ts", "v": [[1000], [2000]]}]])
        output = tmp_path / "out.h5"
        run_conversion(input_path, output, grouped_config)

        with h5py.File(output, "r") as f:
            np.testing.assert_array_equal(
                f["dataset_0/ts/values"][...], [[2.0, 0.0], [1.0, 0.0]]
            )

    def test_attributes_on_group(
        self, input_file: Path, tmp_path: Path, grouped_config: ConverterConfig
    ) -> None:
        """Test string-valued a_* attributes and integer la."""
        output = tmp_path / "out.h5"
        run_conversion(input_file, output, grouped_config)

        with h5py.File(output, "r") as f:
            attrs = f["dataset_0/s3p.activity"].attrs
            assert _attr_str(attrs["a_state_D"]) == "7"
            assert _attr_str(attrs["l_vehicle"]) == "TRK-042"
            assert int(attrs["la"]) == 3
            assert _attr_str(f["dataset_0/x_1"].attrs["original_name"]) == "x"


class TestFailureHandling:
    """Tests for fatal errors."""

    def test_input_error_creates_no_output(self, tmp_path: Path) -> None:
        """Test that malformed input aborts before the output file exists."""
        input_path = tmp_path / "bad.json"
        input_path.write_text("{not json", encoding="utf-8")
        output = tmp_path / "out.h5"

        with pytest.raises(InputError):
            run_conversion(input_path, output)
        assert not output.exists()

    def test_partial_output_kept_by_default(self, write_json, tmp_path: Path) -> None:
        """Test that a store error leaves the partial file in place."""
        input_path = write_json([[{"c": "x", "v": [[1]]}], [{"c": "x", "v": [[2]]}]])
        output = tmp_path / "out.h5"

        with pytest.raises(StoreError):
            run_conversion(input_path, output)

        assert output.exists()
        with h5py.File(output, "r") as f:
            assert "x" in f

    def test_partial_output_removed_when_configured(
        self, write_json, tmp_path: Path
    ) -> None:
        """Test output.remove_partial_on_failure."""
        input_path = write_json([[{"c": "x", "v": [[1]]}], [{"c": "x", "v": [[2]]}]])
        output = tmp_path / "out.h5"
        config = ConverterConfig(output=OutputConfig(remove_partial_on_failure=True))

        with pytest.raises(StoreError):
            ConversionPipeline(config).run(input_path, output)

        assert not output.exists()

    def test_unwritable_output(self, input_file: Path, tmp_path: Path) -> None:
        """Test that a file that cannot be created is a store error."""
        output = tmp_path / "missing-dir" / "out.h5"
        with pytest.raises(StoreError, match="create file"):
            run_conversion(input_file, output)


class TestCoercionWarnings:
    """Tests for warning accounting."""

    def test_bad_cells_counted(self, write_json, tmp_path: Path) -> None:
        """Test that degraded cells are reported in the result."""
        data = [[{"c": "can.speed", "v": [[1000, "abc"], [2000, None]]}]]
        result = run_conversion(write_json(data), tmp_path / "out.h5")
        assert result.n_coercion_warnings == 2
        assert result.n_written == 1

    def test_huge_integer_cell(self, write_json, tmp_path: Path) -> None:
        """Test that an integer beyond float64 range is written as 0.0."""
        data = [[{"c": "x", "v": [[10**400, 1]]}]]
        output = tmp_path / "out.h5"

        result = run_conversion(write_json(data), output)

        assert result.n_coercion_warnings == 1
        assert result.n_written == 1
        with h5py.File(output, "r") as f:
            np.testing.assert_array_equal(f["x"][...], [[0.0, 1.0]])


class TestOutputSafety:
    """Tests that failures never destroy files the run did not create."""

    def test_failed_open_keeps_existing_file(
        self, input_file: Path, tmp_path: Path
    ) -> None:
        """Test that an existing file that cannot be truncated survives."""
        output = tmp_path / "keep.h5"
        with h5py.File(output, "w") as f:
            f.create_dataset("previous", data=[1.0, 2.0])
        config = ConverterConfig(output=OutputConfig(remove_partial_on_failure=True))

        with h5py.File(output, "r"):
            with pytest.raises(StoreError, match="create file"):
                ConversionPipeline(config).run(input_file, output)

        assert output.exists()
        with h5py.File(output, "r") as f:
            np.testing.assert_array_equal(f["previous"][...], [1.0, 2.0])

    def test_slash_in_category_rejected(self, write_json, tmp_path: Path) -> None:
        """Test that a category cannot create nested groups in the flat layout."""
        input_path = write_json([[{"c": "can/speed", "v": [[1000, 1]]}]])

        with pytest.raises(StoreError, match="invalid object name"):
            run_conversion(input_path, tmp_path / "out.h5")
