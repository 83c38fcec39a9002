"""
Batch conversion of a directory tree.

:py:class:`BatchOrchestrator` drives one run: it locates the candidates,
derives a mirrored destination for each, decodes and encodes them one at a
time (or through a bounded worker pool) and reports progress to a sink.

Example::

    from psd2png.batch import BatchOrchestrator
    from psd2png.progress import CallbackSink

    orchestrator = BatchOrchestrator(CallbackSink(print))
    result = orchestrator.start_conversion('/path/to/psd', '/path/to/png')
    for path, error in result.failed:
        print(path, error)

A failure of a single file never stops the batch: it is recorded in
:py:attr:`BatchResult.failed` and the next candidate is processed. Only
the conditions derived from :py:class:`~psd2png.errors.BatchError` stop a
run, and they are raised before any progress event is emitted.
"""

import asyncio
import logging
import os
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Optional, Union

from attrs import define, field

from psd2png.constants import OUTPUT_EXTENSION, BatchState
from psd2png.decoder import ImageDecoder, default_strategies
from psd2png.encoder import ImageEncoder
from psd2png.errors import (
    BatchError,
    FileConversionError,
    MissingParameter,
    NoInputFilesFound,
    OutputDirectoryError,
    PathDerivationError,
)
from psd2png.locator import FileLocator
from psd2png.options import ConversionOptions
from psd2png.progress import CallbackSink, NullSink, ProgressEvent, ProgressSink

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@define(frozen=True)
class ConversionTarget:
    """
    A source file and the destination it converts to.

    .. py:attribute:: source

        Absolute path of the input file.

    .. py:attribute:: destination

        Absolute path of the output file.
    """

    source: str
    destination: str

    @classmethod
    def derive(
        cls,
        source: PathLike,
        input_root: PathLike,
        output_root: PathLike,
        extension: str = OUTPUT_EXTENSION,
    ) -> "ConversionTarget":
        """
        Mirror ``source`` from ``input_root`` under ``output_root`` and
        replace its extension.

        :raise PathDerivationError: when ``source`` is not below ``input_root``.
        """
        source = os.path.abspath(os.fspath(source))
        input_root = os.path.abspath(os.fspath(input_root))
        try:
            relative = os.path.relpath(source, input_root)
        except ValueError as e:
            raise PathDerivationError(
                "Failed to get relative path: %s" % e, source
            ) from e
        if (
            relative == os.curdir
            or relative == os.pardir
            or relative.startswith(os.pardir + os.sep)
            or os.path.isabs(relative)
        ):
            raise PathDerivationError(
                "Failed to get relative path: %s is not below %s" % (source, input_root),
                source,
            )
        stem = os.path.splitext(relative)[0]
        destination = os.path.join(
            os.path.abspath(os.fspath(output_root)), stem + extension.lower()
        )
        return cls(source, destination)


@define
class BatchResult:
    """
    Outcome of a run.

    .. py:attribute:: total

        Number of candidates found.

    .. py:attribute:: succeeded

        Number of files converted.

    .. py:attribute:: failed

        `list` of ``(source, error message)`` in processing order.

    .. py:attribute:: cancelled

        True when the run stopped before processing every candidate.
    """

    total: int = 0
    succeeded: int = 0
    failed: list = field(factory=list)
    cancelled: bool = False

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed_count

    @property
    def ok(self) -> bool:
        return not self.cancelled and self.succeeded == self.total

    def summary(self) -> str:
        """Message of the terminal progress event."""
        if self.cancelled:
            return "Cancelled after %d of %d files" % (self.processed, self.total)
        if not self.failed:
            return "Successfully converted %d files!" % self.succeeded
        return "Converted %d files, %d errors occurred" % (
            self.succeeded,
            self.failed_count,
        )


def check_parameters(input_root: Optional[PathLike], output_root: Optional[PathLike]) -> None:
    """
    Validate the start request without touching the filesystem.

    :raise MissingParameter: when either root is absent or empty.
    """
    for name, value in (("input_root", input_root), ("output_root", output_root)):
        if value is None or os.fspath(value) == "":
            raise MissingParameter(name)


class BatchOrchestrator:
    """
    Drive one batch run.

    :param sink: receiver of :py:class:`~psd2png.progress.ProgressEvent`.
        Defaults to :py:class:`~psd2png.progress.NullSink`.
    :param options: see :py:class:`~psd2png.options.ConversionOptions`.
    :param locator: candidate discovery, built from ``options`` by default.
    :param decoder: decode strategies, built from ``options`` by default.
    :param encoder: PNG writer, built from ``options`` by default.

    .. py:attribute:: state

        Current :py:class:`~psd2png.constants.BatchState`.

    .. py:attribute:: result

        :py:class:`BatchResult` of the run, once converting started.

    .. py:attribute:: error

        The :py:class:`~psd2png.errors.BatchError` that failed the run.
    """

    def __init__(
        self,
        sink: Optional[ProgressSink] = None,
        options: Optional[ConversionOptions] = None,
        locator: Optional[FileLocator] = None,
        decoder: Optional[ImageDecoder] = None,
        encoder: Optional[ImageEncoder] = None,
    ) -> None:
        self.options = options or ConversionOptions()
        self.sink = sink or NullSink()
        self.locator = locator or FileLocator(self.options.extensions)
        self.decoder = decoder or ImageDecoder(default_strategies(self.options.apply_icc))
        self.encoder = encoder or ImageEncoder(self.options.compress_level)
        self.state = BatchState.IDLE
        self.result: Optional[BatchResult] = None
        self.error: Optional[BatchError] = None
        self._cancel = threading.Event()
        self._executor: Optional[Executor] = None

    def cancel(self) -> None:
        """
        Request the run to stop before the next candidate. The file being
        converted, if any, is finished.
        """
        self._cancel.set()

    def start_conversion(self, input_root: PathLike, output_root: PathLike) -> BatchResult:
        """
        Run the batch to completion on a new event loop.

        :raise BatchError: on batch-fatal conditions.
        """
        check_parameters(input_root, output_root)
        return asyncio.run(self.run(input_root, output_root))

    async def run(self, input_root: PathLike, output_root: PathLike) -> BatchResult:
        """
        Convert every candidate under ``input_root`` into ``output_root``.

        :raise MissingParameter: when a root is absent, before any state change.
        :raise DirectoryNotFound: when ``input_root`` is not a directory.
        :raise NoInputFilesFound: when no candidate exists.
        :raise OutputDirectoryError: when ``output_root`` cannot be created.
        """
        check_parameters(input_root, output_root)
        if self.state != BatchState.IDLE:
            raise RuntimeError("Orchestrator already used, state=%s" % self.state.name)

        input_root = os.path.abspath(os.fspath(input_root))
        output_root = os.path.abspath(os.fspath(output_root))

        self.state = BatchState.SCANNING
        logger.info("Scanning %s" % input_root)
        try:
            candidates = await asyncio.to_thread(self.locator.locate, input_root)
            if not candidates:
                raise NoInputFilesFound(input_root)
            try:
                await asyncio.to_thread(os.makedirs, output_root, exist_ok=True)
            except OSError as e:
                raise OutputDirectoryError(output_root, str(e)) from e
        except BatchError as e:
            self.state = BatchState.FAILED
            self.error = e
            logger.error(str(e))
            raise

        plan = self._plan(candidates, input_root, output_root)
        result = self.result = BatchResult(total=len(plan))
        self.state = BatchState.CONVERTING
        self._emit(0.0, "Found %d PSD files to convert" % result.total)

        if self.options.workers > 1:
            with ThreadPoolExecutor(
                max_workers=self.options.workers, thread_name_prefix="psd2png"
            ) as executor:
                self._executor = executor
                try:
                    await self._convert_parallel(plan, result)
                finally:
                    self._executor = None
        else:
            await self._convert_sequential(plan, result)

        result.cancelled = result.processed < result.total
        self.state = BatchState.COMPLETED
        for path, error in result.failed:
            logger.warning("Failed to convert %s: %s" % (path, error))
        logger.info(result.summary())
        self._emit(1.0, result.summary(), terminal=True)
        return result

    def _plan(
        self, candidates: list[str], input_root: str, output_root: str
    ) -> list[tuple[str, Union[ConversionTarget, PathDerivationError]]]:
        plan: list[tuple[str, Union[ConversionTarget, PathDerivationError]]] = []
        seen: dict[str, str] = {}
        for source in candidates:
            try:
                target = ConversionTarget.derive(
                    source, input_root, output_root, self.options.output_extension
                )
            except PathDerivationError as e:
                plan.append((source, e))
                continue
            key = os.path.normcase(target.destination)
            if key in seen:
                logger.warning(
                    "%s and %s both convert to %s; the later one overwrites"
                    % (seen[key], source, target.destination)
                )
            seen[key] = source
            plan.append((source, target))
        return plan

    async def _convert_sequential(
        self,
        plan: list[tuple[str, Union[ConversionTarget, PathDerivationError]]],
        result: BatchResult,
    ) -> None:
        for index, (source, target) in enumerate(plan):
            if self._cancel.is_set():
                logger.info("Cancelled before %s" % source)
                return
            error = await self._process(source, target)
            self._record(result, index, source, error)

    async def _convert_parallel(
        self,
        plan: list[tuple[str, Union[ConversionTarget, PathDerivationError]]],
        result: BatchResult,
    ) -> None:
        semaphore = asyncio.Semaphore(self.options.workers)
        locks: dict[str, asyncio.Lock] = {}

        async def worker(
            source: str, target: Union[ConversionTarget, PathDerivationError]
        ) -> tuple[str, Optional[str], bool]:
            async with semaphore:
                if self._cancel.is_set():
                    return source, None, False
                if isinstance(target, ConversionTarget):
                    lock = locks.setdefault(
                        os.path.normcase(target.destination), asyncio.Lock()
                    )
                    async with lock:
                        return source, await self._process(source, target), True
                return source, await self._process(source, target), True

        tasks = [asyncio.ensure_future(worker(source, target)) for source, target in plan]
        completed = 0
        for future in asyncio.as_completed(tasks):
            source, error, processed = await future
            if not processed:
                continue
            self._record(result, completed, source, error)
            completed += 1

    async def _process(
        self, source: str, target: Union[ConversionTarget, PathDerivationError]
    ) -> Optional[str]:
        """Convert one file; return the error message or None on success."""
        if isinstance(target, PathDerivationError):
            return str(target)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(self._executor, self._convert_one, target)
        except FileConversionError as e:
            return str(e)
        except Exception as e:
            logger.debug("Unexpected error converting %s" % source, exc_info=True)
            return "%s: %s" % (type(e).__name__, e)
        return None

    def _convert_one(self, target: ConversionTarget) -> None:
        image = self.decoder.decode_file(target.source)
        self.encoder.write(image, target.destination)
        logger.debug("converted %s -> %s" % (target.source, target.destination))

    def _record(
        self, result: BatchResult, index: int, source: str, error: Optional[str]
    ) -> None:
        if error is None:
            result.succeeded += 1
        else:
            result.failed.append((source, error))

        # The last step is reported by the terminal event.
        if index + 1 >= result.total:
            return
        fraction = (index + 1) / result.total
        if error is None:
            message = "Converted %d/%d files" % (result.succeeded, result.total)
        else:
            message = "Error converting %s: %s [%d converted, %d failed]" % (
                os.path.basename(source),
                error,
                result.succeeded,
                result.failed_count,
            )
        self._emit(fraction, message)

    def _emit(self, fraction: float, message: str, terminal: bool = False) -> None:
        event = ProgressEvent(fraction, message, terminal)
        try:
            self.sink.emit(event)
        except Exception:
            logger.exception("Progress sink failed")


def start_conversion(
    input_root: PathLike,
    output_root: PathLike,
    sink: Optional[ProgressSink] = None,
    options: Optional[ConversionOptions] = None,
) -> BatchResult:
    """
    Convert the tree under ``input_root`` into ``output_root``.

    See :py:meth:`BatchOrchestrator.start_conversion`.
    """
    return BatchOrchestrator(sink, options).start_conversion(input_root, output_root)


def convert_folder(
    input_root: PathLike,
    output_root: PathLike,
    progress: Optional[Callable[[float, str], Any]] = None,
    **kwargs: Any,
) -> BatchResult:
    """
    Convenience wrapper of :py:func:`start_conversion`.

    :param progress: optional ``callback(fraction, message)``.
    :param kwargs: see :py:class:`~psd2png.options.ConversionOptions`.
    """
    sink = CallbackSink(progress) if progress is not None else None
    return start_conversion(input_root, output_root, sink, ConversionOptions(**kwargs))
