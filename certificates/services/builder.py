import json
import logging
from pathlib import Path

from django.conf import settings
from django.utils import timezone

from certificates.models import Certificate
from certificates.services.tiers import TIER_STYLES, tier_for_score

logger = logging.getLogger(__name__)

LATEX_REPLACEMENTS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def latex_escape(value):
    if value is None:
        return ""
    if not isinstance(value, str):
        return value
    return "".join(LATEX_REPLACEMENTS.get(ch, ch) for ch in value)


# 800x600 CSS pixels at 96 dpi
DEFAULT_THEME = {
    "page": {"width": "8.3333in", "height": "6.25in"},
    "colors": {
        "primary": "1E3A5F",
        "accent": "2C5282",
        "muted": "555555",
    },
    "logo": {
        "enabled": True,
        "path": "",
        "override_school_logo": False,
    },
    "labels": {
        "seal": "KARUNA SEAL",
        "signatory": "Authorized Signatory",
    },
    "tiers": {},
}


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_theme_path(path_value) -> str:
    if not path_value:
        return ""
    candidate = Path(path_value)
    if not candidate.is_absolute():
        candidate = Path(settings.BASE_DIR) / candidate
    if candidate.exists():
        return str(candidate)
    logger.warning("Theme asset not found: %s", candidate)
    return ""


def load_theme() -> dict:
    theme_file = getattr(settings, "CERTIFICATE_THEME_FILE", None)
    if not theme_file:
        return DEFAULT_THEME
    try:
        parsed = json.loads(Path(theme_file).read_text(encoding="utf-8"))
        if not isinstance(parsed, dict):
            logger.warning("Theme config is not an object: %s", theme_file)
            parsed = {}
    except FileNotFoundError:
        logger.warning("Theme config file not found: %s", theme_file)
        parsed = {}
    except json.JSONDecodeError as exc:
        logger.warning("Theme config JSON invalid: %s", exc)
        parsed = {}
    return _deep_merge(DEFAULT_THEME, parsed)


def _tier_style(theme: dict, tier: str) -> dict:
    style = {"border": TIER_STYLES[tier]["border"], "gradient": list(TIER_STYLES[tier]["gradient"]), "badge": TIER_STYLES[tier]["badge"]}
    return _deep_merge(style, theme.get("tiers", {}).get(tier, {}))


def _logo_path(school, theme_logo: dict) -> str:
    if not theme_logo.get("enabled", True):
        return ""
    logo_path = ""
    if school.logo:
        try:
            logo_path = school.logo.path
        except (NotImplementedError, ValueError):
            logo_path = ""
    theme_logo_path = _resolve_theme_path(theme_logo.get("path"))
    if theme_logo.get("override_school_logo") or not logo_path:
        logo_path = theme_logo_path
    if logo_path and not Path(logo_path).exists():
        return ""
    return logo_path


def build_context(certificate: Certificate) -> dict:
    """
    Template context for one certificate. Text fields are LaTeX escaped;
    the same values are also exposed as ``\\def`` macros (names without
    underscores) for templates that prefer macros over placeholders.
    """
    submission = certificate.submission
    school = submission.school
    if submission.score is None:
        raise ValueError(f"Submission {submission.id} has no score")
    tier = certificate.tier or tier_for_score(submission.score)

    theme = load_theme()
    colors = theme.get("colors", {})
    labels = theme.get("labels", {})
    page = theme.get("page", {})
    style = _tier_style(theme, tier)
    bg_start, bg_mid, bg_end = style["gradient"][:3]

    issued = certificate.completed_at or certificate.created_at or timezone.now()
    date_label = timezone.localtime(issued).strftime("%d %B %Y")
    logo_path = _logo_path(school, theme.get("logo", {}))

    organization = latex_escape(getattr(settings, "ORGANIZATION_NAME", "KARUNA INTERNATIONAL"))
    school_name = latex_escape(school.school_name)
    kc_no = latex_escape(school.kc_no)
    activity_title = latex_escape(submission.event.title)
    score = str(submission.score)

    context = {
        "ORG_NAME": organization,
        "TIER": tier,
        "SCHOOL_NAME": school_name,
        "KC_NO": kc_no,
        "ACTIVITY_TITLE": activity_title,
        "SCORE": score,
        "DATE_LABEL": date_label,
        "BADGE": latex_escape(style["badge"]),
        "BORDER_COLOR": style["border"],
        "BG_START": bg_start,
        "BG_MID": bg_mid,
        "BG_END": bg_end,
        "PRIMARY_COLOR": colors.get("primary", DEFAULT_THEME["colors"]["primary"]),
        "ACCENT_COLOR": colors.get("accent", DEFAULT_THEME["colors"]["accent"]),
        "MUTED_COLOR": colors.get("muted", DEFAULT_THEME["colors"]["muted"]),
        "PAGE_WIDTH": page.get("width", DEFAULT_THEME["page"]["width"]),
        "PAGE_HEIGHT": page.get("height", DEFAULT_THEME["page"]["height"]),
        "SEAL_LABEL": latex_escape(labels.get("seal", "")),
        "SIGNATORY_LABEL": latex_escape(labels.get("signatory", "")),
        "LOGO_PATH": logo_path,
        "HAS_LOGO": 1 if logo_path else 0,
        "DOC_TYPE": "certificate",
    }
    macros = {
        "ORGNAME": organization,
        "TIERNAME": tier,
        "SCHOOLNAME": school_name,
        "KCNO": kc_no,
        "ACTIVITYTITLE": activity_title,
        "SCOREVAL": score,
        "DATEVAL": date_label,
    }
    if logo_path:
        macros["logopath"] = logo_path
    context["_MACROS"] = macros
    # overlay positioning on "current page" settles on the second pass
    context["XELATEX_PASSES"] = 2
    return context
