"""
Conversion pipeline.

Reads the JSON input, normalizes each record, assigns namespace-unique names
and writes the result to an HDF5 file in the configured layout.
"""

from dataclasses import dataclass
from pathlib import Path

import h5py

from telemetry_h5.config.settings import ConverterConfig, LayoutMode
from telemetry_h5.ingestion.reader import Namespaces, read_namespaces
from telemetry_h5.layout.naming import NameRegistry
from telemetry_h5.normalization.entry import transform_entry
from telemetry_h5.schemas.records import RawRecord
from telemetry_h5.storage.layouts import (
    namespace_group_name,
    write_flat_record,
    write_grouped_record,
)
from telemetry_h5.storage.writer import H5Store, StoreError
from telemetry_h5.utils.logging import get_logger, log_context

log = get_logger(__name__)


@dataclass
class ConversionResult:
    """
    Result of one conversion run.

    Attributes:
        output_path: HDF5 file written.
        layout: Layout used.
        n_namespaces: Namespaces in the input.
        n_records: Records in the input.
        n_written: Records persisted.
        n_skipped: Records skipped because their matrix was empty.
        n_renamed: Records stored under a suffixed name.
        n_coercion_warnings: Cells that degraded to 0.0.
        compression_level: Gzip level requested for flat datasets.
        n_compression_fallbacks: Datasets written uncompressed because gzip was unavailable.
    """

    output_path: Path
    layout: LayoutMode
    n_namespaces: int = 0
    n_records: int = 0
    n_written: int = 0
    n_skipped: int = 0
    n_renamed: int = 0
    n_coercion_warnings: int = 0
    compression_level: int = 0
    n_compression_fallbacks: int = 0


class ConversionPipeline:
    """
    JSON to HDF5 conversion.

    Records are processed one at a time in input order. Each namespace gets
    its own NameRegistry. Any store error aborts the run.
    """

    def __init__(self, config: ConverterConfig | None = None) -> None:
        """
        Initialize pipeline.

        Args:
            config: Converter configuration (defaults if omitted).
        """
        self.config = config or ConverterConfig()

    def run(self, input_path: Path, output_path: Path) -> ConversionResult:
        """
        Convert input_path into output_path.

        Args:
            input_path: JSON input document.
            output_path: HDF5 file to create (truncated if it exists).

        Returns:
            ConversionResult with counts.

        Raises:
            InputError: If the input cannot be read; no output is created.
            StoreError: If writing fails; see output.remove_partial_on_failure.
        """
        namespaces = read_namespaces(input_path)
        return self.write(namespaces, output_path)

    def write(self, namespaces: Namespaces, output_path: Path) -> ConversionResult:
        """Write already validated namespaces to output_path."""
        output_path = Path(output_path)
        result = ConversionResult(
            output_path=output_path,
            layout=self.config.layout.mode,
            n_namespaces=len(namespaces),
            n_records=sum(len(ns) for ns in namespaces),
            compression_level=self.config.compression_level,
        )

        log.info(
            "Starting conversion",
            output=str(output_path),
            layout=result.layout.value,
            namespaces=result.n_namespaces,
            records=result.n_records,
        )

        # Cleanup only applies once this run has opened (truncated) the file
        with H5Store(output_path) as store:
            try:
                for index, records in enumerate(namespaces):
                    with log_context(namespace=index):
                        self._write_namespace(store, index, records, result)
            except StoreError:
                store.close()
                self._handle_failure(output_path)
                raise
            result.n_compression_fallbacks = store.compression_fallbacks

        log.info(
            "Conversion complete",
            written=result.n_written,
            skipped=result.n_skipped,
            renamed=result.n_renamed,
            coercion_warnings=result.n_coercion_warnings,
        )
        return result

    def _write_namespace(
        self,
        store: H5Store,
        index: int,
        records: list[RawRecord],
        result: ConversionResult,
    ) -> None:
        registry = NameRegistry()

        parent: h5py.Group
        if self.config.layout.mode == LayoutMode.GROUPED:
            parent = store.create_group(store.root, namespace_group_name(index))
        else:
            parent = store.root

        for raw in records:
            record = transform_entry(raw)
            result.n_coercion_warnings += record.coercion_warnings

            if record.is_empty:
                log.debug("Skipping record with empty matrix", category=raw.category)
                result.n_skipped += 1
                continue

            name, renamed = registry.resolve(record.category)
            if renamed:
                result.n_renamed += 1

            if self.config.layout.mode == LayoutMode.GROUPED:
                write_grouped_record(store, parent, record, name, renamed=renamed)
            else:
                write_flat_record(
                    store,
                    parent,
                    record,
                    name,
                    renamed=renamed,
                    compression_level=self.config.compression_level,
                )
            result.n_written += 1
            log.debug("Wrote record", name=name, rows=record.rows, cols=record.cols)

        log.info("Namespace written", records=len(records), names=len(registry))

    def _handle_failure(self, output_path: Path) -> None:
        if not self.config.output.remove_partial_on_failure:
            log.error("Conversion aborted, partial output left in place", path=str(output_path))
            return
        if output_path.exists():
            output_path.unlink()
            log.error("Conversion aborted, partial output removed", path=str(output_path))


def run_conversion(
    input_path: Path,
    output_path: Path,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """
    Convenience function to run the conversion pipeline.

    Args:
        input_path: JSON input document.
        output_path: HDF5 file to create.
        config: Converter configuration.

    Returns:
        ConversionResult.
    """
    return ConversionPipeline(config).run(input_path, output_path)
