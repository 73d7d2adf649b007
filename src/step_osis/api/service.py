"""Conversion orchestration shared by the CLI and embedding integrations."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
import time
from typing import Any, TypeVar

from step_osis.adapters.obfuscation import obfuscate_key
from step_osis.adapters.osis2mod import CompilerResult, ModuleCompiler, Osis2ModCompiler
from step_osis.core.config import ConversionRequest
from step_osis.core.diagnostics import DiagnosticEmitter, ensure_emitter
from step_osis.core.discovery import discover_sources
from step_osis.core.exceptions import ConfigurationError, MergeError
from step_osis.core.merge import merge_documents
from step_osis.core.reposition import PendingNodes, reposition_pre_verse_nodes
from step_osis.core.serialize import write_document
from step_osis.core.transform import apply_stylesheet


__all__ = ["ConversionResult", "ConversionService", "convert"]

T = TypeVar("T")


@dataclass(slots=True)
class ConversionResult:
    """Captured outcome of a conversion run."""

    output_path: Path
    sources: list[Path]
    moved_nodes: int = 0
    orphaned_nodes: int = 0
    timings: dict[str, int] = field(default_factory=dict)
    obfuscated_key: str | None = None
    compiler: CompilerResult | None = None


class _StageClock:
    def __init__(self, emitter: DiagnosticEmitter, timings: dict[str, int]) -> None:
        self._emitter = emitter
        self._timings = timings

    @contextmanager
    def stage(self, name: str, label: str) -> Iterator[None]:
        self._emitter.event("stage_started", {"stage": name, "label": label})
        started = time.perf_counter()
        yield
        elapsed = int((time.perf_counter() - started) * 1000)
        self._timings[name] = elapsed
        self._emitter.event(
            "stage_completed", {"stage": name, "label": label, "elapsed_ms": elapsed}
        )

    def run(self, name: str, label: str, func: Callable[[], T]) -> T:
        with self.stage(name, label):
            return func()


class ConversionService:
    """High-level façade running the discover/merge/transform/write pipeline."""

    def __init__(self, compiler_factory: Callable[[Path], ModuleCompiler] | None = None) -> None:
        self._compiler_factory = compiler_factory or Osis2ModCompiler

    def convert(
        self,
        request: ConversionRequest,
        *,
        compiler: ModuleCompiler | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> ConversionResult:
        """Run one conversion; any failure aborts the run and propagates."""
        emitter = ensure_emitter(emitter)
        timings: dict[str, int] = {}
        clock = _StageClock(emitter, timings)

        if request.compile_module and compiler is None and request.osis2mod is None:
            raise ConfigurationError("Module compilation requested but no osis2mod path was given.")

        sources = clock.run(
            "discover",
            "Read files",
            lambda: discover_sources(request.ot_path, request.nt_path, request.dialect),
        )
        emitter.event(
            "sources_discovered", {"count": len(sources), "dialect": request.dialect.token}
        )
        if not sources:
            raise MergeError(
                f"No .{request.dialect.extension} source documents found in "
                + ", ".join(str(path) for path in request.source_dirs)
            )

        merged = clock.run("merge", "Merging", lambda: merge_documents(request.dialect.anchor, sources))
        transformed = clock.run(
            "transform",
            "Transforming",
            lambda: apply_stylesheet(merged, request.dialect, work=request.work_id),
        )

        pending = PendingNodes()
        moved = clock.run(
            "reposition",
            "Moving nodes",
            lambda: reposition_pre_verse_nodes(transformed, pending),
        )
        if len(pending):
            emitter.warning(
                f"{len(pending)} pre-verse node(s) had no following verse and were left in place."
            )
            emitter.event("orphaned_pre_verse", {"count": len(pending)})

        output = clock.run("write", "Writing", lambda: write_document(transformed, request.output_path))
        emitter.event("output_written", {"path": str(output.resolve())})

        result = ConversionResult(
            output_path=output,
            sources=sources,
            moved_nodes=moved,
            orphaned_nodes=len(pending),
            timings=timings,
        )

        if request.compile_module:
            result.obfuscated_key, result.compiler = self._compile(
                request, output, clock, emitter, compiler
            )
        return result

    def _compile(
        self,
        request: ConversionRequest,
        osis_file: Path,
        clock: _StageClock,
        emitter: DiagnosticEmitter,
        compiler: ModuleCompiler | None,
    ) -> tuple[str | None, CompilerResult]:
        key = request.encryption_key.get_secret_value() if request.encryption_key else None
        masked: str | None = None
        if key and request.obfuscation_key:
            # Only surfaced for manual copy into the module .conf file.
            masked = obfuscate_key(key, request.obfuscation_key.get_secret_value())
            emitter.event("module_key", {"value": masked})

        if compiler is None:
            assert request.osis2mod is not None
            compiler = self._compiler_factory(request.osis2mod)

        def _relay(line: str) -> None:
            emitter.event("compiler_output", {"line": line})

        module_dir = request.resolved_module_dir
        outcome = clock.run(
            "compile",
            "Converting",
            lambda: compiler.compile(module_dir, osis_file.resolve(), key, on_line=_relay),
        )
        return masked, outcome


_DEFAULT_SERVICE = ConversionService()


def convert(request: ConversionRequest, **kwargs: Any) -> ConversionResult:
    """Run ``request`` with the default service."""
    return _DEFAULT_SERVICE.convert(request, **kwargs)
