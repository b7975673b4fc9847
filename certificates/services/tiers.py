EXCELLENCE = "Excellence"
MERIT = "Merit"
PARTICIPATION = "Participation"

EXCELLENCE_MIN = 80
MERIT_MIN = 60

TIER_STYLES = {
    EXCELLENCE: {
        "border": "FFD700",
        "gradient": ("FFF9E6", "FFFEF5", "FFF9E6"),
        "badge": "Excellence (80+)",
    },
    MERIT: {
        "border": "C0C0C0",
        "gradient": ("F5F5F5", "FFFFFF", "F5F5F5"),
        "badge": "Merit (60-79)",
    },
    PARTICIPATION: {
        "border": "CD7F32",
        "gradient": ("FDF5E6", "FFFEF5", "FDF5E6"),
        "badge": "Participation (<60)",
    },
}


def tier_for_score(score: int) -> str:
    if score is None:
        raise ValueError("Certificates need a score")
    if score >= EXCELLENCE_MIN:
        return EXCELLENCE
    if score >= MERIT_MIN:
        return MERIT
    return PARTICIPATION
