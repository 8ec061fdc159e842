from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from area_engine.errors import UnknownPresetError
from area_engine.models import EstablishmentPoint

Fields = dict[str, str]

# SIRENE v3 column labels as published on data.gouv.fr
COL_ETAT_ETAB = "Etat administratif de l'établissement"
COL_ETAT_UL = "Etat administratif de l'unité légale"
COL_FERMETURE_ETAB = "Date de fermeture de l'établissement"
COL_FERMETURE_UL = "Date de fermeture de l'unité légale"
COL_EMPLOYEUR_ETAB = "Caractère employeur de l'établissement"
COL_SIEGE = "Etablissement siège"
COL_CAT_JURIDIQUE = "Catégorie juridique de l'unité légale"
COL_CAT_ENTREPRISE = "Catégorie de l'entreprise"
COL_TRANCHE_EFF_ETAB = "Tranche de l'effectif de l'établissement"
COL_SECTION_ETAB = "Section de l'établissement"
COL_ESS = "Economie sociale et solidaire unité légale"
COL_MISSION = "Société à mission unité légale"
COL_IDENTIF_ASSOC = "Identifiant association de l'unité légale"
COL_DIFFUSION_ETAB = "Statut de diffusion de l'établissement"

TRANCHE_50_PLUS = frozenset({"21", "22", "31", "32", "41", "42", "51", "52", "53"})


@dataclass(frozen=True)
class PresetFilter:
    id: str
    label: str
    group: str
    description: str
    test: Callable[[Fields], bool]


def _is_active(fields: Fields) -> bool:
    return (
        fields.get(COL_ETAT_ETAB) == "A"
        and fields.get(COL_ETAT_UL) == "A"
        and not fields.get(COL_FERMETURE_ETAB)
        and not fields.get(COL_FERMETURE_UL)
    )


def _is_closed(fields: Fields) -> bool:
    return fields.get(COL_ETAT_ETAB) == "F" or bool(fields.get(COL_FERMETURE_ETAB))


def _is_company(fields: Fields) -> bool:
    category = fields.get(COL_CAT_JURIDIQUE, "")
    return bool(category) and not category.startswith("1")


def _is_association(fields: Fields) -> bool:
    return fields.get(COL_CAT_JURIDIQUE, "").startswith("92") or bool(fields.get(COL_IDENTIF_ASSOC))


def _legal_category_in(*codes: str) -> Callable[[Fields], bool]:
    return lambda fields: fields.get(COL_CAT_JURIDIQUE, "") in codes


def _equals(column: str, value: str) -> Callable[[Fields], bool]:
    return lambda fields: fields.get(column) == value


def _sector(section: str) -> Callable[[Fields], bool]:
    return _equals(COL_SECTION_ETAB, section)


PRESET_GROUPS = ("Status", "Legal form", "Size", "Values", "Sector")

PRESET_FILTERS: tuple[PresetFilter, ...] = (
    PresetFilter("active", "Active", "Status", "Open establishment and active parent company, no closure date on either", _is_active),
    PresetFilter("closed", "Closed", "Status", "Establishment is administratively closed or has a closure date", _is_closed),
    PresetFilter("hq", "HQ only", "Status", "Only headquarter establishments (siège social)", _equals(COL_SIEGE, "true")),
    PresetFilter("diffusible", "Public", "Status", "Establishment opted into public diffusion", _equals(COL_DIFFUSION_ETAB, "O")),
    PresetFilter("company", "Company", "Legal form", "Corporate entity, not an individual entrepreneur", _is_company),
    PresetFilter("freelance", "Freelance", "Legal form", "Individual entrepreneur (catégorie juridique 1000)", _legal_category_in("1000")),
    PresetFilter("sas", "SAS / SASU", "Legal form", "Société par Actions Simplifiée (5710) or SASU (5720)", _legal_category_in("5710", "5720")),
    PresetFilter("sarl", "SARL / EURL", "Legal form", "SARL (5499) or single-owner EURL (5498)", _legal_category_in("5499", "5498")),
    PresetFilter("association", "Association", "Legal form", "Non-profit association (92xx) or association identifier", _is_association),
    PresetFilter("employer", "Employer", "Size", "Establishment has declared employees", _equals(COL_EMPLOYEUR_ETAB, "O")),
    PresetFilter("pme", "PME", "Size", "Small or medium enterprise (catégorie INSEE PME)", _equals(COL_CAT_ENTREPRISE, "PME")),
    PresetFilter(
        "eti-ge",
        "ETI / GE",
        "Size",
        "Mid-size (ETI) or large enterprise (GE)",
        lambda fields: fields.get(COL_CAT_ENTREPRISE, "") in ("ETI", "GE"),
    ),
    PresetFilter(
        "50plus",
        "50+ employees",
        "Size",
        "Establishment with 50 or more employees (tranche d'effectif >= 21)",
        lambda fields: fields.get(COL_TRANCHE_EFF_ETAB, "") in TRANCHE_50_PLUS,
    ),
    PresetFilter("ess", "ESS", "Values", "Economie Sociale et Solidaire company", _equals(COL_ESS, "O")),
    PresetFilter("mission", "Société à mission", "Values", "Company with a declared social or environmental mission", _equals(COL_MISSION, "O")),
    PresetFilter("commerce", "Commerce", "Sector", "Wholesale and retail trade (NAF section G)", _sector("G")),
    PresetFilter("industry", "Industry", "Sector", "Manufacturing (NAF section C)", _sector("C")),
    PresetFilter("construction", "Construction", "Sector", "Building and civil engineering (NAF section F)", _sector("F")),
    PresetFilter("tech", "IT / Tech", "Sector", "Information and communication (NAF section J)", _sector("J")),
    PresetFilter("health", "Health", "Sector", "Human health and social work (NAF section Q)", _sector("Q")),
    PresetFilter("food", "Food & Hotels", "Sector", "Accommodation and food services (NAF section I)", _sector("I")),
    PresetFilter("transport", "Transport", "Sector", "Transportation and storage (NAF section H)", _sector("H")),
    PresetFilter("finance", "Finance", "Sector", "Financial and insurance activities (NAF section K)", _sector("K")),
    PresetFilter("realestate", "Real estate", "Sector", "Real estate activities (NAF section L)", _sector("L")),
    PresetFilter("pro-services", "Pro services", "Sector", "Professional, scientific and technical activities (NAF section M)", _sector("M")),
    PresetFilter("education", "Education", "Sector", "Education (NAF section P)", _sector("P")),
    PresetFilter("agriculture", "Agriculture", "Sector", "Agriculture, forestry and fishing (NAF section A)", _sector("A")),
)

_PRESETS_BY_ID = {preset.id: preset for preset in PRESET_FILTERS}


def resolve_presets(preset_ids: Iterable[str]) -> list[PresetFilter]:
    resolved = []
    for preset_id in preset_ids:
        preset = _PRESETS_BY_ID.get(preset_id)
        if preset is None:
            raise UnknownPresetError(f"unknown preset: {preset_id}")
        resolved.append(preset)
    return resolved


def apply_presets(
    points: Sequence[EstablishmentPoint],
    preset_ids: Iterable[str],
) -> list[EstablishmentPoint]:
    """Keep the points passing every active preset."""
    presets = resolve_presets(preset_ids)
    if not presets:
        return list(points)
    return [point for point in points if all(preset.test(point.fields) for preset in presets)]
