"""Conversion task: copy/compress the scanned files, then write the reports."""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Sequence, Set

from .compression import CompressionLevel, compress_text
from .constants import DOC_EXTENSION, OUTPUT_DIR_NAME
from .report import (
    build_merged_dump,
    build_structure_report,
    write_merged_dump,
    write_structure_report,
)
from .settings import Settings


logger = logging.getLogger(__name__)

# progress(done, total, message)
ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class ConvertOptions:
    compression: CompressionLevel = CompressionLevel.SMART
    generate_structure: bool = False
    compact_structure: bool = True
    generate_merged: bool = True
    godot_compact: bool = True
    # only used to hide folders from the structure report
    ignored_folders: Sequence[str] = ()

    @staticmethod
    def from_settings(settings: Settings, ignored_folders: Sequence[str] = ()) -> "ConvertOptions":
        return ConvertOptions(
            compression=CompressionLevel.parse(settings.compression),
            generate_structure=settings.generate_structure,
            compact_structure=settings.compact_structure,
            generate_merged=settings.generate_merged,
            godot_compact=settings.godot_compact,
            ignored_folders=tuple(ignored_folders),
        )


@dataclass(frozen=True)
class ConversionResult:
    output_dir: Path
    # source file -> converted copy, in processing order
    converted: Dict[Path, Path] = field(default_factory=dict)
    structure_file: Optional[Path] = None
    merged_file: Optional[Path] = None
    cancelled: bool = False


def destination_name(source: Path) -> str:
    """Flat output name: ``main.gd`` -> ``main.gd.txt``; markdown keeps its name."""
    name = source.name
    return name if name.lower().endswith(DOC_EXTENSION) else name + ".txt"


def prepare_output_dir(output_dir: Path) -> None:
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)


class ConversionTask:
    """One conversion run over an already scanned file list.

    ``run()`` works on the calling thread; ``start()``/``join()`` run it on a
    background thread. ``cancel()`` stops the run before the next file.
    """

    def __init__(
        self,
        source_dir: "str | Path",
        files: Sequence[Path],
        options: Optional[ConvertOptions] = None,
        *,
        merge_selection: Optional[Iterable[Path]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.files = list(files)
        self.options = options or ConvertOptions()
        self.merge_selection: Set[Path] = (
            set(self.files) if merge_selection is None else set(merge_selection)
        )
        self.progress = progress

        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.result: Optional[ConversionResult] = None
        self.error: Optional[BaseException] = None

    # ------------------------------------------------------------------
    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def start(self) -> threading.Thread:
        if self._thread is not None:
            raise RuntimeError("ConversionTask already started.")
        self._thread = threading.Thread(target=self._run_captured, name="conversion", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> Optional[ConversionResult]:
        """Wait for a started run; re-raises whatever the run raised."""
        if self._thread is None:
            raise RuntimeError("ConversionTask was not started.")
        self._thread.join(timeout)
        if self.error is not None:
            raise self.error
        return self.result

    def _run_captured(self) -> None:
        try:
            self.run()
        except Exception as e:
            logger.exception("Conversion failed")
            self.error = e

    # ------------------------------------------------------------------
    def _report(self, done: int, total: int, message: str) -> None:
        logger.info(message)
        if self.progress is not None:
            self.progress(done, total, message)

    def run(self) -> ConversionResult:
        if not self.source_dir.is_dir():
            raise NotADirectoryError(
                f"Source directory {str(self.source_dir)!r} does not exist."
            )
        opts = self.options
        total = len(self.files)
        output_dir = self.source_dir / OUTPUT_DIR_NAME

        self._report(0, total, "Preparing output directory...")
        prepare_output_dir(output_dir)

        converted: Dict[Path, Path] = {}
        used_names: Set[str] = set()
        for done, source in enumerate(self.files, start=1):
            if self.cancelled:
                logger.warning("Conversion cancelled after %d of %d files", done - 1, total)
                break
            self._report(done, total, f"Processing {source.name}")
            dest = output_dir / self._unique_name(source, used_names)
            if self._convert_file(source, dest):
                converted[source] = dest

        structure_file = None
        merged_file = None
        if not self.cancelled:
            if opts.generate_structure:
                self._report(total, total, "Generating structure report...")
                report = build_structure_report(
                    self.source_dir,
                    converted.keys(),
                    self.merge_selection,
                    opts.compression,
                    compact_mode=opts.compact_structure,
                    ignored_folders=opts.ignored_folders,
                )
                structure_file = write_structure_report(output_dir, report)

            if opts.generate_merged and converted:
                self._report(total, total, "Merging files...")
                project = self.source_dir.resolve().name
                dump = build_merged_dump(
                    project, converted, self.merge_selection, opts.compression
                )
                merged_file = write_merged_dump(output_dir, project, dump)

            self._report(total, total, "Done.")

        self.result = ConversionResult(
            output_dir=output_dir,
            converted=converted,
            structure_file=structure_file,
            merged_file=merged_file,
            cancelled=self.cancelled,
        )
        return self.result

    def _unique_name(self, source: Path, used: Set[str]) -> str:
        """Flat names can collide; prefix the relative folder, then a counter."""
        base = destination_name(source)
        candidate = base
        if candidate.lower() in used:
            try:
                folders = source.parent.relative_to(self.source_dir).parts
            except ValueError:
                folders = source.parent.parts[-1:]
            if folders:
                candidate = "_".join(folders + (base,))
        n = 2
        while candidate.lower() in used:
            candidate = f"{n}_{base}"
            n += 1
        used.add(candidate.lower())
        return candidate

    def _convert_file(self, source: Path, dest: Path) -> bool:
        opts = self.options
        compress = (
            opts.compression is not CompressionLevel.NONE
            and not source.name.lower().endswith(DOC_EXTENSION)
        )
        try:
            if compress:
                try:
                    content = source.read_text(encoding="utf-8")
                except UnicodeDecodeError:
                    logger.warning("%s is not UTF-8 text; copied as is", source)
                else:
                    dest.write_text(
                        compress_text(
                            content, source, opts.compression, godot_compact=opts.godot_compact
                        ),
                        encoding="utf-8",
                    )
                    return True
            shutil.copyfile(source, dest)
            return True
        except OSError as e:
            logger.error("Could not convert %s: %s", source, e)
            return False


def convert_project(
    source_dir: "str | Path",
    files: Sequence[Path],
    options: Optional[ConvertOptions] = None,
    *,
    merge_selection: Optional[Iterable[Path]] = None,
    progress: Optional[ProgressCallback] = None,
) -> ConversionResult:
    """Run a conversion synchronously and return its result."""
    task = ConversionTask(
        source_dir, files, options, merge_selection=merge_selection, progress=progress
    )
    return task.run()
