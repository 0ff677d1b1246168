"""
Localized user-facing messages.

Spanish is the operating language of the recruiting team and the default;
English is kept for API consumers and tests.
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "es"

MESSAGES: Dict[str, Dict[str, str]] = {
    "es": {
        # Orchestrator outcomes
        "no_active_recruiters": "No hay reclutadores activos disponibles",
        "position_not_found": "Posición no encontrada",
        "position_already_assigned": "La posición ya está asignada (estado: {status}). Use force=true para reasignar.",
        "position_closed": "La posición está cerrada (estado: {status}) y no puede asignarse",
        "no_open_positions": "No se encontraron posiciones abiertas para asignar",
        "no_eligible_recruiters": "Ningún reclutador elegible para las posiciones solicitadas",
        "no_capacity": "Sin capacidad disponible: todos los reclutadores propuestos están al límite",
        "persistence_failed": "Error al guardar las asignaciones; la capacidad reservada fue liberada",
        "position_taken_concurrently": "Otra solicitud asignó una de las posiciones al mismo tiempo; no se guardó ninguna asignación",
        "assigned_single": "Posición asignada a {name}",
        "assigned_multiple": "{count} posiciones asignadas",
        "assigned_partial": "{assigned} asignadas. {failed} no asignadas por capacidad de reclutadores.",
        "shortfall_warning": "{failed} posición(es) no asignadas por capacidad de reclutadores.",
        "status_update_warning": "No se pudo actualizar el estado de {count} posición(es); se conciliará después.",
        "release_warning": "No se pudo liberar la carga del reclutador anterior en {count} posición(es).",
        # Fit criteria
        "zone_primary": "zona principal",
        "zone_secondary": "zona secundaria",
        "zone_none": "fuera de zona",
        "capability_fit": "nivel adecuado",
        "capability_over": "sobrecalificado",
        "capability_under": "nivel insuficiente",
        "headroom_high": "baja carga actual",
        "headroom_low": "carga alta",
        # Priority
        "priority_overdue": "{tier}: {days} día(s) de atraso sobre el SLA",
        "priority_on_time": "{tier}: dentro del SLA",
        "priority_has_recruiter": "ya tiene reclutador",
    },
    "en": {
        "no_active_recruiters": "No active recruiters available",
        "position_not_found": "Position not found",
        "position_already_assigned": "Position is already assigned (status: {status}). Use force=true to reassign.",
        "position_closed": "Position is closed (status: {status}) and cannot be assigned",
        "no_open_positions": "No open positions found to assign",
        "no_eligible_recruiters": "No eligible recruiter for the requested positions",
        "no_capacity": "No capacity available: every proposed recruiter is at capacity",
        "persistence_failed": "Failed to save assignments; reserved capacity was released",
        "position_taken_concurrently": "Another request assigned one of these positions at the same time; no assignments were saved",
        "assigned_single": "Position assigned to {name}",
        "assigned_multiple": "{count} positions assigned",
        "assigned_partial": "{assigned} assigned. {failed} not assigned due to recruiter capacity.",
        "shortfall_warning": "{failed} position(s) could not be assigned due to recruiter capacity.",
        "status_update_warning": "Status could not be updated for {count} position(s); it will be reconciled later.",
        "release_warning": "Previous recruiter load could not be released for {count} position(s).",
        "zone_primary": "zone match",
        "zone_secondary": "secondary zone",
        "zone_none": "cross-zone",
        "capability_fit": "matching capability",
        "capability_over": "over-qualified",
        "capability_under": "under-qualified",
        "headroom_high": "low current load",
        "headroom_low": "high current load",
        "priority_overdue": "{tier}: {days} day(s) past SLA",
        "priority_on_time": "{tier}: within SLA",
        "priority_has_recruiter": "already has a recruiter",
    },
}


def get_message(key: str, locale: str = DEFAULT_LOCALE, **kwargs) -> str:
    """Look up and format a message; unknown locales fall back to the default."""
    catalog = MESSAGES.get(locale)
    if catalog is None:
        logger.warning("Unknown locale %r; using %r", locale, DEFAULT_LOCALE)
        catalog = MESSAGES[DEFAULT_LOCALE]
    template = catalog.get(key) or MESSAGES[DEFAULT_LOCALE][key]
    return template.format(**kwargs) if kwargs else template
