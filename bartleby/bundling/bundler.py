"""JavaScript bundler adapter and page-script bundling."""

from __future__ import annotations

import json
import subprocess
import tempfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..errors import BundleError
from ..logging import get_logger

Transform = Callable[[str], str]


class Bundler(Protocol):
    """Compiles an entry module into a single bundle."""

    def compile(
        self,
        entry: Path,
        *,
        defines: Mapping[str, str] | None = None,
        transforms: Mapping[Path, Transform] | None = None,
    ) -> str:
        """Return bundled source; ``defines`` are literal text substitutions."""


def wrap_as_factory(code: str) -> str:
    """Defer a page script until the router invokes it for its route."""
    return f"export default () => {{\n{code}\n}}"


class EsbuildBundler:
    """Runs the ``esbuild`` CLI with the entry source on stdin.

    Transforms apply to modules imported from the entry by absolute path: the
    transformed copy is staged in a temporary directory and the entry's import
    specifier is pointed at it.
    """

    def __init__(
        self,
        executable: str = "esbuild",
        *,
        output_format: str = "iife",
        runner: Callable[..., str] | None = None,
    ) -> None:
        self.executable = executable
        self.output_format = output_format
        self._runner = runner or self._default_runner
        self.logger = get_logger("bundler")

    def compile(
        self,
        entry: Path,
        *,
        defines: Mapping[str, str] | None = None,
        transforms: Mapping[Path, Transform] | None = None,
    ) -> str:
        try:
            source = entry.read_text(encoding="utf-8")
        except OSError as exc:
            raise BundleError(f"Cannot read bundle entry {entry}: {exc}") from exc
        for placeholder, replacement in (defines or {}).items():
            source = source.replace(placeholder, replacement)

        args = [
            self.executable,
            "--bundle",
            f"--format={self.output_format}",
            f"--sourcefile={entry.name}",
            "--log-level=warning",
        ]
        with tempfile.TemporaryDirectory(prefix="bartleby-") as staging:
            if transforms:
                source = self._stage_transforms(source, transforms, Path(staging))
            self.logger.debug("Bundling %s", entry)
            return self._runner(args, cwd=entry.parent, input_text=source)

    @staticmethod
    def _stage_transforms(
        source: str, transforms: Mapping[Path, Transform], staging: Path
    ) -> str:
        for index, (module_path, transform) in enumerate(sorted(transforms.items())):
            staged = staging / f"{index}-{module_path.name}"
            try:
                staged.write_text(transform(module_path.read_text(encoding="utf-8")), encoding="utf-8")
            except OSError as exc:
                raise BundleError(f"Cannot stage {module_path}: {exc}") from exc
            for quote in ('"', "'"):
                specifier = f"{quote}{module_path.as_posix()}{quote}"
                source = source.replace(specifier, json.dumps(staged.as_posix()))
        return source

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path, input_text: str) -> str:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                input=input_text,
                check=True,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise BundleError(f"Bundler executable {args[0]!r} was not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit code {exc.returncode}"
            raise BundleError(f"Bundler failed: {detail}") from exc
        return completed.stdout


@dataclass(frozen=True)
class ScriptJob:
    """A page script to bundle and where to write the result."""

    source: Path
    output_path: str


def bundle_page_scripts(
    bundler: Bundler,
    jobs: Iterable[ScriptJob],
    write: Callable[[str, str], object],
    *,
    max_workers: Optional[int] = None,
) -> List[str]:
    """Bundle page scripts concurrently and wait for all of them.

    Every failure is collected; if any job failed a single :class:`BundleError`
    lists them after the remaining jobs have finished.
    """
    job_list = list(jobs)
    if not job_list:
        return []
    written: List[str] = []
    failures: List[Tuple[Path, str]] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bartleby-bundle") as pool:
        futures: Dict[object, ScriptJob] = {
            pool.submit(bundler.compile, job.source): job for job in job_list
        }
        for future in as_completed(futures):
            job = futures[future]
            try:
                code = future.result()
            except Exception as exc:
                failures.append((job.source, str(exc)))
                continue
            write(job.output_path, code)
            written.append(job.output_path)
    if failures:
        summary = "; ".join(f"{path}: {reason}" for path, reason in sorted(failures))
        raise BundleError(f"Failed to bundle {len(failures)} page script(s): {summary}", failures)
    return sorted(written)


__all__ = [
    "Bundler",
    "EsbuildBundler",
    "ScriptJob",
    "Transform",
    "bundle_page_scripts",
    "wrap_as_factory",
]
