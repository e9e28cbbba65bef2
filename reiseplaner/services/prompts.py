"""
Prompt templates for plan generation.
Builds the system and user messages sent to the language model.
"""
from typing import NamedTuple

from ..models.request import TravelRequest


SYSTEM_PROMPT = """Du bist ein professioneller Reiseplaner und Assistent. Deine Aufgabe ist es, auf Basis der folgenden Nutzereingaben einen detaillierten Reiseplan zu erstellen, der jeden Tag strukturiert beschreibt, was der Nutzer unternehmen kann. Füge außerdem passende Hotels, Aktivitäten und ggf. Flüge hinzu. Gib alles in einem strukturierten JSON-Format aus.

Ziel: Ein Reiseplan, der sofort nutzbar ist, inspirierend wirkt und direkt zur Buchung animiert. Verwende Sprache, die angenehm, hilfreich und lebendig ist. Ermutige zur Aktion.

Strukturiere deine Antwort im folgenden JSON-Format:

{
  "reiseziele": ["Paris", "Versailles"],
  "reisezeitraum": "12.10.2025 - 18.10.2025",
  "personen": 2,
  "budget": "mittel",
  "unterkunft": {
    "vorschlag": "Hotel Le Petit Paris",
    "preisProNacht": "120€",
    "affiliateLink": "https://booking.com/..."
  },
  "tagesplan": [
    {
      "tag": 1,
      "datum": "12.10.2025",
      "beschreibung": "Ankunft in Paris, Einchecken, Spaziergang durch das Quartier Latin",
      "aktivitaeten": [
        {
          "titel": "Stadtspaziergang am Seine-Ufer",
          "beschreibung": "Entspanntes Kennenlernen der Umgebung",
          "affiliateLink": "https://viator.com/..."
        }
      ],
      "restaurant": "Le Procope",
      "bemerkung": "Leichtes Programm am Ankunftstag"
    }
  ],
  "tipps": [
    "Nehmt bequeme Schuhe mit",
    "Tickets für den Louvre besser vorab buchen"
  ],
  "premiumEmpfehlung": {
    "beschreibung": "Concierge-Service für persönliche WhatsApp-Beratung & Echtzeitpreise",
    "preis": "29€",
    "jetztBuchenLink": "https://deinservice.com/upgrade"
  }
}

Regeln:
- "budget" ist genau einer der Werte "niedrig", "mittel", "hoch" oder "luxus".
- Datumsangaben im Format TT.MM.JJJJ, der Reisezeitraum als "TT.MM.JJJJ - TT.MM.JJJJ".
- "personen" und "tag" sind ganze Zahlen.
- Alle Links sind vollständige URLs.

Gib deine Antwort nur als JSON ohne Fließtext oder Einleitung. Achte auf natürlich klingende Formulierungen, aber strukturiere sauber. Verwende Affiliate-optimierte Begriffe in den Links."""


# Request field -> label, in the order the lines appear in the user message
USER_PROMPT_FIELDS = (
    ("ziel", "Ziel(e)"),
    ("abflughafen", "Startflughafen"),
    ("reisezeitraum", "Reisezeitraum"),
    ("budget", "Budget"),
    ("personen", "Personen"),
    ("interessen", "Interessen"),
    ("reisestil", "Reisestil"),
    ("unterkunft", "Unterkunft"),
    ("besondereWuensche", "Besondere Wünsche"),
)


class PromptPair(NamedTuple):
    system: str
    user: str


def get_system_prompt() -> str:
    """Return the fixed system instruction for the travel planner role."""
    return SYSTEM_PROMPT


def _format_value(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v not in (None, ""))
    return str(value).strip()


def build_user_prompt(request: TravelRequest) -> str:
    """
    Render the user's request as one line per filled field.

    Empty and missing fields are left out completely so the model never
    sees a value the user did not give.
    """
    lines = []
    for field, label in USER_PROMPT_FIELDS:
        value = getattr(request, field)
        if value is None:
            continue
        text = _format_value(value)
        if text:
            lines.append(f"{label}: {text}")
    return "\n".join(lines)


def build_prompts(request: TravelRequest) -> PromptPair:
    """Build the (system, user) message pair for a request."""
    return PromptPair(get_system_prompt(), build_user_prompt(request))


def build_messages(prompts: PromptPair) -> list[dict]:
    """Chat-completion messages for a prompt pair."""
    return [
        {"role": "system", "content": prompts.system},
        {"role": "user", "content": prompts.user},
    ]
