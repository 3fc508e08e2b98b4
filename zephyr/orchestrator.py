"""Compilation pipeline for ``.zph`` components."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .codegen import CodeRenderer, default_renderer
from .config import CompileOptions, load_config
from .core.computed import ComputedEngine
from .core.constants import extract_constants
from .core.events import generate_event_emitter, uses_event_emission
from .core.imports import (
    FileSourceLoader,
    ImportResolver,
    ResolutionContext,
    SourceLoader,
    normalize_path,
)
from .core.lifecycle import extract_lifecycle_hooks, generate_lifecycle_code
from .core.reactivity import ReactivityTransformer, collect_reactive_variables
from .core.script import ScriptNormalizer, TypeScriptStripper
from .core.store import compile_store, store_binding
from .errors import CompilationError, WarningCollector, format_diagnostic
from .logging import configure_logging, get_logger
from .models import CompileResult, ParsedComponent, ResolvedImport
from .parser import parse_component
from .postproc.minify import Minifier
from .session import CompileSession
from .style.leakage import LeakageCheck, detect_leakage, discover_checks
from .style.scoper import StyleScoper
from .template.compiler import TemplateCompiler
from .template.components import collect_child_scope_ids, render_components
from .template.context import TemplateContext
from .template.references import parse_references
from .template.scoping import wrap_root

DEFAULT_FILENAME = "Component.zph"


class Compiler:
    """Compiles components into HTML, scoped CSS and JS glue.

    A compiler owns one :class:`CompileSession`, so the selector cache and the
    scope id collision registry persist across every compile it performs.
    The import cache only lives for a single top-level compile.
    """

    def __init__(
        self,
        options: CompileOptions | None = None,
        *,
        session: CompileSession | None = None,
        loader: SourceLoader | None = None,
        normalizer: ScriptNormalizer | None = None,
        minifier: Minifier | None = None,
        renderer: CodeRenderer | None = None,
        leakage_checks: Optional[Sequence[LeakageCheck]] = None,
    ) -> None:
        self.options = options or CompileOptions()
        self.session = session or CompileSession()
        self.loader = loader or FileSourceLoader()
        self.normalizer = normalizer or TypeScriptStripper()
        self.minifier = minifier or Minifier()
        self.renderer = renderer or default_renderer()
        self.logger = get_logger("orchestrator")
        self._leakage_checks = list(leakage_checks) if leakage_checks is not None else None
        self._resolver = ImportResolver(self.loader, self._compile_import)
        self._templates = TemplateCompiler()

    @classmethod
    def from_config(cls, path: Path | str, **kwargs) -> "Compiler":
        """Build a compiler from the ``.zephyr.yml`` found at ``path``.

        A ``logging`` section in the file configures the ``zephyr`` logger.
        """
        config = load_config(Path(path))
        if config.logging.enabled:
            configure_logging(verbose=config.logging.verbose, log_file=config.logging.file)
        return cls(config.options, **kwargs)

    def compile_file(self, path: Path | str) -> CompileResult:
        """Compile the component stored at ``path``."""
        file_path = normalize_path(Path(path))
        try:
            source = self.loader.load(file_path)
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise CompilationError(
                f"Component file not found: {file_path}",
                file=str(file_path),
                suggestion="Check the path passed to the compiler",
            ) from exc
        return self._run(source, str(file_path), file_path)

    def compile_source(
        self,
        source: str,
        filename: str = DEFAULT_FILENAME,
        *,
        base_path: Path | str | None = None,
    ) -> CompileResult:
        """Compile ``source`` as if it were read from ``filename``.

        Relative imports resolve against ``base_path`` when given, otherwise
        against the current working directory.
        """
        path = normalize_path(Path(base_path)) if base_path is not None else None
        return self._run(source, filename, path)

    def reset(self) -> None:
        self.session.reset()

    def _run(self, source: str, filename: str, path: Optional[Path]) -> CompileResult:
        self.logger.debug("Compiling %s", filename)
        context = ResolutionContext(chain=[path] if path is not None else [])
        try:
            result = self._compile(source, filename, path, context)
        except CompilationError:
            raise
        except Exception as exc:
            raise CompilationError(f"Unexpected compilation error: {exc}", file=filename) from exc

        if self.options.dev:
            for warning in result.warnings:
                self.logger.warning(format_diagnostic(warning))
        self.logger.debug("Compiled %s with %d warning(s)", filename, len(result.warnings))
        return result

    def _compile_import(self, source: str, path: Path, context: ResolutionContext) -> CompileResult:
        return self._compile(source, str(path), path, context)

    def _compile(
        self,
        source: str,
        filename: str,
        path: Optional[Path],
        context: ResolutionContext,
    ) -> CompileResult:
        warnings = WarningCollector()
        component = parse_component(source, filename, warnings)
        self._check_collision(component, warnings)

        imports = self._resolver.resolve(component, path, context)
        if component.is_store:
            return self._compile_store_component(component, warnings)

        scope_id = component.scope_id
        constants = extract_constants(component.script, self.options.props)
        references = parse_references(component.template)
        lifecycle = extract_lifecycle_hooks(component.script)

        variables = collect_reactive_variables(lifecycle.script, constants)
        for reference in references:
            variable = variables.get(reference.variable or "")
            if variable is not None and reference.path:
                variable.track_path(reference.path)

        computed = ComputedEngine(scope_id, self.renderer).process(lifecycle.script, variables)
        for message in computed.warnings:
            warnings.warn(message, file=filename, suggestion="Remove one of the dependencies to break the cycle")

        template_context = TemplateContext(
            scope_id=scope_id,
            constants=constants,
            reactive=frozenset(variables),
            computed=frozenset(computed.variables),
            warnings=warnings,
            filename=filename,
            renderer=self.renderer,
        )
        template = self._templates.compile(component.template, template_context)

        reactivity = ReactivityTransformer(scope_id, self.renderer).transform(
            computed.script,
            variables,
            extra_names=computed.variables,
            rendered=template_context.rendered,
            has_update_hooks=lifecycle.has_update_hooks,
        )
        hooks = generate_lifecycle_code(
            scope_id,
            lifecycle.hooks,
            names=[*variables, *computed.variables],
            renderer=self.renderer,
        )

        html = render_components(template.html, imports, warnings=warnings, filename=filename)
        html = wrap_root(html, scope_id) if html.strip() else ""

        css = ""
        if component.style:
            detect_leakage(component.style, component.name, warnings, self._checks())
            css = StyleScoper(self.session.selectors).scope(
                component.style,
                scope_id,
                component.style_isolated,
                collect_child_scope_ids(imports),
            )

        normalized = self.normalizer.normalize(reactivity.script, filename)
        children = _distinct(imports)

        store_blocks: List[str] = []
        child_blocks: List[str] = []
        hoisted: List[str] = list(normalized.imports)
        child_css: List[str] = []
        for resolved in children:
            hoisted.extend(resolved.result.imports)
            warnings.extend(resolved.result.warnings)
            if resolved.is_store:
                store_blocks.append(resolved.result.js_body)
            else:
                if resolved.result.css:
                    child_css.append(resolved.result.css)
                if resolved.result.js_body.strip():
                    child_blocks.append(_isolate(resolved.result.js_body))
        for alias, resolved in imports.items():
            if resolved.is_store:
                store_blocks.append(store_binding(alias, resolved.component.name))

        sections = [
            *store_blocks,
            normalized.body,
            generate_event_emitter(scope_id, self.renderer) if uses_event_emission(component.script) else "",
            hooks.declarations,
            reactivity.code,
            template.binding_js,
            template.loop_exports_js,
            template.handler_js,
            template.listener_js,
            template.directive_js,
            computed.code,
            hooks.execution,
            *child_blocks,
        ]
        js_body = "\n\n".join(section.strip() for section in sections if section and section.strip())
        css = "\n".join(part for part in [css, *child_css] if part.strip())
        import_lines = list(dict.fromkeys(hoisted))
        js = "\n".join(import_lines + [js_body]) if import_lines else js_body

        html, css, js = self._minify(html, css, js)
        return CompileResult(
            html=html,
            css=css,
            js=js,
            js_body=js_body,
            component=component,
            imports=import_lines,
            warnings=list(warnings),
        )

    def _compile_store_component(self, component: ParsedComponent, warnings: WarningCollector) -> CompileResult:
        normalized = self.normalizer.normalize(component.store, component.path)
        js_body = compile_store(component.name, normalized.body, component.scope_id, self.renderer)
        js = "\n".join(normalized.imports + [js_body]) if normalized.imports else js_body
        _, _, js = self._minify("", "", js)
        return CompileResult(
            html="",
            css="",
            js=js,
            js_body=js_body,
            component=component,
            imports=list(normalized.imports),
            warnings=list(warnings),
        )

    def _check_collision(self, component: ParsedComponent, warnings: WarningCollector) -> None:
        registry = self.session.scope_ids
        if not registry.register(component.scope_id, component.name):
            return
        names = registry.get_components(component.scope_id)
        warnings.warn(
            f"Scope ID collision detected: '{component.scope_id}' is used by multiple components",
            file=component.path,
            suggestion=f"Components with same scope ID: {', '.join(names)}. Consider renaming one of the components.",
        )

    def _checks(self) -> List[LeakageCheck]:
        if self._leakage_checks is None:
            self._leakage_checks = discover_checks(self.options.leakage_checks)
        return self._leakage_checks

    def _minify(self, html: str, css: str, js: str) -> tuple[str, str, str]:
        minify_html, minify_css, minify_js = self.options.minify_targets()
        if minify_html and html:
            html = self.minifier.minify_html(html)
        if minify_css and css:
            css = self.minifier.minify_css(css)
        if minify_js and js:
            js = self.minifier.minify_js(js)
        return html, css, js


def _distinct(imports: Dict[str, ResolvedImport]) -> List[ResolvedImport]:
    seen: Dict[Path, ResolvedImport] = {}
    for resolved in imports.values():
        seen.setdefault(resolved.path, resolved)
    return list(seen.values())


def _isolate(js_body: str) -> str:
    """Give a child component's code its own function scope."""
    return f"(function () {{\n{js_body}\n}})();"


__all__ = ["Compiler", "DEFAULT_FILENAME"]
