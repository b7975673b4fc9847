import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from django.conf import settings


class LatexRenderError(Exception):
    pass


class LatexRenderer:
    """
    Renders a LaTeX template by simple placeholder replacement and compiles it with XeLaTeX.
    Placeholders use the form <<PLACEHOLDER>>.
    """

    def __init__(self, template_path: Path, context: dict):
        self.template_path = Path(template_path)
        self.context = context
        self.logger = logging.getLogger(__name__)
        try:
            self.passes = max(1, int(context.get("XELATEX_PASSES", getattr(settings, "LATEX_DEFAULT_PASSES", 1))))
        except (TypeError, ValueError):
            self.passes = 1

    def render_tex(self, dest_dir: Path) -> Path:
        tex = self.template_path.read_text(encoding="utf-8")
        context = dict(self.context)

        # copy template assets (seal, fonts) so relative paths resolve inside the build dir
        assets_source = self.template_path.parent / "assets"
        assets_dest = dest_dir / "assets"
        if assets_source.is_dir() and not assets_dest.exists():
            shutil.copytree(assets_source, assets_dest)

        context.setdefault("HAS_LOGO", 1 if context.get("LOGO_PATH") and Path(context["LOGO_PATH"]).exists() else 0)
        context.pop("XELATEX_PASSES", None)
        macros = context.pop("_MACROS", None)

        for key, value in context.items():
            tex = tex.replace(f"<<{key}>>", str(value))

        if macros:
            macro_lines = ["% injected"]
            for name, value in macros.items():
                if not name:
                    continue
                macro_lines.append(f"\\def\\{name}{{{value}}}")
            macro_block = "\n".join(macro_lines) + "\n"
            if "\\begin{document}" in tex:
                tex = tex.replace("\\begin{document}", macro_block + "\\begin{document}", 1)
            else:
                tex = macro_block + tex

        out = dest_dir / "certificate.tex"
        out.write_text(tex, encoding="utf-8")
        self.logger.info(
            "LaTeX render prepared",
            extra={
                "template": str(self.template_path),
                "dest_dir": str(dest_dir),
                "has_logo": context.get("HAS_LOGO", 0),
                "tier": context.get("TIER", ""),
            },
        )
        return out

    def compile_pdf(self, tex_path: Path) -> Path:
        workdir = tex_path.parent
        cmd = [
            getattr(settings, "XELATEX_BIN", "xelatex"),
            "-interaction=nonstopmode",
            "-halt-on-error",
            tex_path.name,
        ]
        run_logs = []
        try:
            for idx in range(self.passes):
                result = subprocess.run(cmd, cwd=workdir, check=True, capture_output=True, timeout=60, text=True)
                run_logs.append(f"PASS {idx + 1}: {' '.join(cmd)}\nSTDOUT:\n{result.stdout}\n\nSTDERR:\n{result.stderr}")
            (workdir / f"{tex_path.stem}.compile.log").write_text("\n\n".join(run_logs), encoding="utf-8")
            self.logger.info("LaTeX compiled successfully", extra={"tex": str(tex_path), "passes": self.passes})
        except subprocess.CalledProcessError as exc:
            log_path = workdir / (tex_path.stem + ".log")
            log_content = ""
            if log_path.exists():
                log_content = log_path.read_text(encoding="utf-8", errors="ignore")
                # head and tail are enough to locate the failing line
                start = log_content[:1200]
                end = log_content[-1200:] if len(log_content) > 1200 else ""
                log_content = start + ("\n...\n" if end else "") + end
            if exc.stdout or exc.stderr:
                log_content = (log_content + "\n\n" if log_content else "") + f"STDOUT:\n{exc.stdout}\n\nSTDERR:\n{exc.stderr}"
            self.logger.error("XeLaTeX failed: %s", exc)
            raise LatexRenderError(log_content or str(exc)) from exc
        except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
            self.logger.error("XeLaTeX could not run: %s", exc)
            raise LatexRenderError(str(exc)) from exc
        return workdir / (tex_path.stem + ".pdf")

    def _archive_logs(self, tmpdir: Path, tex: Path):
        log_dir = getattr(settings, "LATEX_LOG_DIR", None)
        if not log_dir:
            log_dir = Path(getattr(settings, "MEDIA_ROOT", Path("."))) / "latex_logs"
        log_dir = Path(log_dir) / str(self.context.get("DOC_TYPE", "generic")).lower()
        log_dir.mkdir(parents=True, exist_ok=True)
        for ext in (".log", ".compile.log", ".tex"):
            src = tmpdir / f"{tex.stem}{ext}"
            if src.exists():
                dest = log_dir / f"{tex.stem}_{tmpdir.name}{ext}"
                shutil.copy(src, dest)

    def generate(self) -> bytes:
        tmpdir = Path(tempfile.mkdtemp(prefix="certificate_", dir=getattr(settings, "LATEX_TMP_DIR", None) or None))
        tex = None
        try:
            tex = self.render_tex(tmpdir)
            pdf_path = self.compile_pdf(tex)
            return pdf_path.read_bytes()
        finally:
            if tex is not None:
                self._archive_logs(tmpdir, tex)
            shutil.rmtree(tmpdir, ignore_errors=True)
