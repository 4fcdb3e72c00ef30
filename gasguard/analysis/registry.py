"""
Analyzer registry for language-specific analyzers.

Indexes analyzer instances by name and by language, dispatches single
and batch scans to every analyzer serving a language, and merges their
results into one consistent AnalysisResult.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Union

from gasguard.core.exceptions import (
    AnalyzerCollisionError,
    DispatchError,
    UnknownLanguageError,
)
from gasguard.analysis.analyzer import (
    BaseAnalyzer,
    calculate_summary,
    elapsed_ms,
)
from gasguard.analysis.models import (
    AnalysisResult,
    AnalyzerConfig,
    Language,
    Rule,
    ScanError,
)

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "registry-1.0.0"
DEFAULT_MAX_WORKERS = 4


def merge_results(
    results: Iterable[AnalysisResult],
    version: str = REGISTRY_VERSION,
) -> AnalysisResult:
    """
    Merge several analysis results into one.

    Findings and errors are concatenated, file counts and times summed,
    and the severity summary is recomputed from the merged findings.
    Savings are summed and kept only when positive. A single result is
    returned unchanged; no results yield an empty result.
    """
    results = list(results)
    if not results:
        return AnalysisResult.empty(version)
    if len(results) == 1:
        return results[0]

    findings = [finding for result in results for finding in result.findings]
    errors = [error for result in results for error in result.errors]
    savings = sum(r.total_estimated_gas_savings or 0 for r in results)

    return AnalysisResult(
        findings=findings,
        files_analyzed=sum(r.files_analyzed for r in results),
        analysis_time=sum(r.analysis_time for r in results),
        analyzer_version=version,
        summary=calculate_summary(findings),
        total_estimated_gas_savings=savings if savings > 0 else None,
        errors=errors,
    )


class AnalyzerRegistry:
    """
    Central registry for analyzer instances.

    The name table and language index are meant to be written at setup
    and teardown only; concurrent ``register``/``unregister`` while
    scans are running is not supported.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        self.max_workers = max_workers
        self._analyzers: Dict[str, BaseAnalyzer] = {}
        self._language_map: Dict[Language, List[BaseAnalyzer]] = {}

    def register(self, analyzer: BaseAnalyzer) -> BaseAnalyzer:
        """
        Register an analyzer under its name and every language it serves.

        Raises:
            AnalyzerCollisionError: If the name is already registered.
        """
        name = analyzer.get_name()
        if name in self._analyzers:
            raise AnalyzerCollisionError(name)

        self._analyzers[name] = analyzer
        for language in analyzer.get_supported_languages():
            self._language_map.setdefault(language, []).append(analyzer)

        logger.debug(
            f"Registered analyzer {name} for "
            f"{[lang.value for lang in analyzer.get_supported_languages()]}"
        )
        return analyzer

    def unregister(self, name: str) -> None:
        """Dispose and remove an analyzer; unknown names are ignored."""
        analyzer = self._analyzers.pop(name, None)
        if analyzer is None:
            return

        analyzer.dispose()

        for language in list(self._language_map):
            bucket = [a for a in self._language_map[language] if a is not analyzer]
            if bucket:
                self._language_map[language] = bucket
            else:
                del self._language_map[language]

        logger.debug(f"Unregistered analyzer {name}")

    def get_analyzer(self, name: str) -> Optional[BaseAnalyzer]:
        return self._analyzers.get(name)

    def get_analyzers_for_language(
        self, language: Union[Language, str]
    ) -> List[BaseAnalyzer]:
        """Analyzers serving a language, in registration order."""
        return list(self._language_map.get(Language.from_tag(language), []))

    def get_all_analyzers(self) -> List[BaseAnalyzer]:
        return list(self._analyzers.values())

    def get_supported_languages(self) -> List[Language]:
        return list(self._language_map.keys())

    def is_language_supported(self, language: Union[Language, str]) -> bool:
        return Language.from_tag(language) in self._language_map

    def get_all_rules(self, language: Union[Language, str, None] = None) -> List[Rule]:
        """List rules of every analyzer, optionally for one language."""
        analyzers = (
            self.get_analyzers_for_language(language)
            if language is not None
            else self.get_all_analyzers()
        )
        return [rule for analyzer in analyzers for rule in analyzer.get_rules()]

    def __contains__(self, name: str) -> bool:
        return name in self._analyzers

    def __len__(self) -> int:
        return len(self._analyzers)

    def initialize_all(self, config: Optional[AnalyzerConfig] = None) -> None:
        for analyzer in self._analyzers.values():
            analyzer.initialize(config)

    def dispose_all(self) -> None:
        """Dispose every analyzer and clear both tables."""
        for analyzer in self._analyzers.values():
            analyzer.dispose()
        self._analyzers.clear()
        self._language_map.clear()

    def _resolve(
        self,
        language: Union[Language, str],
        analyzer_name: Optional[str],
    ) -> List[BaseAnalyzer]:
        resolved = Language.from_tag(language)

        if analyzer_name:
            analyzer = self._analyzers.get(analyzer_name)
            if analyzer is None:
                raise DispatchError(
                    f'Analyzer "{analyzer_name}" not found',
                    details={"analyzer": analyzer_name},
                )
            if not analyzer.supports_language(resolved):
                raise DispatchError(
                    f'Analyzer "{analyzer_name}" does not support language "{resolved.value}"',
                    details={"analyzer": analyzer_name, "language": resolved.value},
                )
            return [analyzer]

        analyzers = self._language_map.get(resolved, [])
        if not analyzers:
            raise DispatchError(
                f'No analyzer found for language "{resolved.value}"',
                details={"language": resolved.value},
            )
        return list(analyzers)

    def analyze(
        self,
        code: str,
        file_path: str,
        language: Union[Language, str],
        config: Optional[AnalyzerConfig] = None,
        analyzer_name: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Analyze one file with the analyzer(s) serving its language.

        Args:
            code: Source text.
            file_path: Path reported in findings.
            language: Language member or tag.
            config: Optional per-call configuration.
            analyzer_name: Restrict the scan to one named analyzer.

        Returns:
            The single analyzer's result, or the merge of all results
            when several analyzers serve the language.

        Raises:
            DispatchError: If no analyzer can handle the request.
        """
        try:
            analyzers = self._resolve(language, analyzer_name)
        except DispatchError as e:
            logger.warning(f"Cannot dispatch {file_path}: {e}")
            raise

        if len(analyzers) == 1:
            return analyzers[0].analyze(code, file_path, config)

        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(analyzers))
        ) as executor:
            futures = [
                executor.submit(analyzer.analyze, code, file_path, config)
                for analyzer in analyzers
            ]
            results = [future.result() for future in futures]

        return merge_results(results)

    def analyze_multiple(
        self,
        files: Mapping[str, str],
        languages: Mapping[str, Union[Language, str]],
        config: Optional[AnalyzerConfig] = None,
    ) -> AnalysisResult:
        """
        Analyze a batch of files, grouped by their declared language.

        Files without a language entry, or whose language no analyzer
        serves, are skipped. A file declared with an unrecognized tag is
        skipped too and reported as an error entry. The merged
        ``analysis_time`` is the wall-clock duration of the whole batch.
        """
        start = time.perf_counter()

        files_by_language: Dict[Language, Dict[str, str]] = {}
        unknown_tags: List[ScanError] = []
        for file_path, code in files.items():
            tag = languages.get(file_path)
            if not tag:
                logger.debug(f"No language declared for {file_path}, skipping")
                continue
            try:
                language = Language.from_tag(tag)
            except UnknownLanguageError as e:
                logger.warning(f"Skipping {file_path}: {e}")
                unknown_tags.append(ScanError(
                    file=file_path,
                    message=str(e),
                    error_type=type(e).__name__,
                ))
                continue
            files_by_language.setdefault(language, {})[file_path] = code

        results = []
        for language, language_files in files_by_language.items():
            analyzers = self._language_map.get(language, [])
            if not analyzers:
                logger.debug(
                    f"No analyzer for {language.value}, skipping {len(language_files)} files"
                )
                continue
            for analyzer in analyzers:
                results.append(analyzer.analyze_multiple(language_files, config))

        merged = merge_results(results)
        merged.errors.extend(unknown_tags)
        merged.analysis_time = elapsed_ms(start)

        logger.info(
            f"Analyzed {merged.files_analyzed} files across "
            f"{len(files_by_language)} languages: {len(merged.findings)} findings"
        )
        return merged


def create_default_registry(max_workers: int = DEFAULT_MAX_WORKERS) -> AnalyzerRegistry:
    """Registry with the built-in Solidity, Vyper and Rust analyzers."""
    from gasguard.analysis.languages import BUILTIN_ANALYZERS

    registry = AnalyzerRegistry(max_workers=max_workers)
    for analyzer_class in BUILTIN_ANALYZERS:
        registry.register(analyzer_class())
    return registry
