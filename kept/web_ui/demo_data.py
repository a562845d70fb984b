"""Demo records for running the web UI without a configured backend."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from kept.adapters.backend_memory import InMemoryBackend
from kept.domain.time_utils import ensure_aware

SYSTEM_TYPES = (
    ("type_furnace", "Furnace", "hvac", 20),
    ("type_ac", "Central AC", "hvac", 15),
    ("type_water_heater", "Water Heater", "plumbing", 12),
    ("type_sump_pump", "Sump Pump", "plumbing", 10),
    ("type_panel", "Electrical Panel", "electrical", 40),
    ("type_dishwasher", "Dishwasher", "appliances", 10),
    ("type_roof", "Roof", "exterior", 25),
    ("type_foundation", "Foundation", "structural", 100),
)


def _day(now: datetime, offset: int) -> str:
    return (now + timedelta(days=offset)).date().isoformat()


def build_demo_backend(now: Optional[datetime] = None, *, onboarded: bool = True) -> InMemoryBackend:
    """Return an ``InMemoryBackend`` holding one home with a few systems and tasks.

    With ``onboarded=False`` only the profile and the system catalog exist, so
    the onboarding flow can be walked from the start.
    """
    backend = InMemoryBackend(now=now)
    today = ensure_aware(now)
    for type_id, name, category, lifespan in SYSTEM_TYPES:
        backend.add_system_type(
            {"_id": type_id, "name": name, "category": category, "defaultLifespanYears": lifespan}
        )
    backend.set_profile(
        {
            "_id": "user_demo",
            "fullName": "Alex Homeowner",
            "email": "alex@example.com",
            "tier": "free",
            "onboardingCompletedAt": int(today.timestamp() * 1000) if onboarded else None,
        }
    )
    if not onboarded:
        return backend

    home_id = backend.add_home(
        {
            "_id": "home_demo",
            "name": "Maple Street",
            "addressLine1": "12 Maple St",
            "city": "Springfield",
            "state": "IL",
            "zipCode": "62701",
            "yearBuilt": 1998,
            "squareFootage": 2100,
            "overallHealthScore": 82,
            "systemsCount": 3,
        }
    )
    furnace = backend.add_system(
        {
            "_id": "system_furnace",
            "homeId": home_id,
            "systemTypeId": "type_furnace",
            "installDate": f"{today.year - 12}-10-01",
            "healthScore": 68,
            "manufacturer": "Carrier",
            "modelNumber": "59SC5",
            "needsAttention": True,
            "remainingLifePercent": 40,
            "estimatedReplacementYear": today.year + 8,
            "estimatedReplacementCost": 5200,
        }
    )
    heater = backend.add_system(
        {
            "_id": "system_water_heater",
            "homeId": home_id,
            "systemTypeId": "type_water_heater",
            "installDate": f"{today.year - 6}-04-15",
            "healthScore": 88,
            "manufacturer": "Rheem",
        }
    )
    backend.add_system(
        {
            "_id": "system_roof",
            "homeId": home_id,
            "systemTypeId": "type_roof",
            "installDate": f"{today.year - 15}-06-01",
            "healthScore": 74,
        }
    )
    backend.add_template(
        "type_furnace",
        {
            "_id": "tmpl_filter",
            "name": "Replace furnace filter",
            "description": "Swap the air filter to keep airflow and efficiency up.",
            "difficulty": "easy",
            "estimatedTimeMinutes": 10,
            "quickSkim": ["Turn the system off", "Match the filter size", "Arrow points to the blower"],
            "whenToCallPro": ["Filter slot is damaged", "Burning smell after replacement"],
            "diySteps": [
                "Switch the thermostat off.",
                "Slide out the old filter.",
                "Insert the new filter with the arrow toward the blower.",
                "Switch the thermostat back on.",
            ],
            "safetyWarnings": ["Never run the furnace without a filter."],
            "commonMistakes": ["Installing the filter backwards."],
            "deepDiveContent": {
                "whyItMatters": "A clogged filter makes the blower work harder and shortens its life.",
                "proTips": ["Write the install date on the filter frame."],
            },
        },
    )
    backend.add_task(
        {
            "_id": "task_filter",
            "homeId": home_id,
            "systemId": furnace,
            "name": "Replace furnace filter",
            "status": "upcoming",
            "dueDate": _day(today, -3),
            "category": "hvac",
            "priority": "high",
            "proCostLow": 80,
            "proCostHigh": 120,
            "diyCostLow": 15,
            "diyCostHigh": 25,
            "template": {
                "name": "Replace furnace filter",
                "difficulty": "easy",
                "estimatedTimeMinutes": 10,
                "quickSkim": ["Turn the system off", "Match the filter size"],
                "diySteps": ["Switch the thermostat off.", "Swap the filter.", "Switch it back on."],
            },
        }
    )
    backend.add_task(
        {
            "_id": "task_flush",
            "homeId": home_id,
            "systemId": heater,
            "name": "Flush water heater",
            "status": "upcoming",
            "dueDate": _day(today, 5),
            "category": "plumbing",
            "priority": "medium",
            "proCostLow": 150,
            "proCostHigh": 250,
            "diyCostLow": 0,
            "diyCostHigh": 10,
        }
    )
    backend.add_task(
        {
            "_id": "task_gutters",
            "homeId": home_id,
            "name": "Clean gutters",
            "status": "upcoming",
            "dueDate": _day(today, 30),
            "category": "exterior",
            "priority": "routine",
            "proCostLow": 120,
            "proCostHigh": 200,
        }
    )
    backend.add_task(
        {
            "_id": "task_smoke",
            "homeId": home_id,
            "name": "Test smoke detectors",
            "status": "completed",
            "dueDate": _day(today, -20),
            "completedDate": _day(today, -21),
            "category": "electrical",
            "priority": "critical",
        }
    )
    backend.add_issue(
        furnace,
        {
            "_id": "issue_igniter",
            "issueName": "Igniter failure",
            "severity": "medium",
            "description": "Hot surface igniters crack with age and stop lighting the burners.",
            "currentProbability": 35,
            "probability3yr": 55,
            "probability5yr": 70,
            "repairCostLow": 150,
            "repairCostHigh": 350,
            "isDiyFixable": True,
            "diyDifficulty": "moderate",
        },
    )
    backend.add_packet(
        {
            "_id": "packet_demo",
            "homeId": home_id,
            "systemId": furnace,
            "title": "Furnace: No heat",
            "symptom": "No heat",
            "createdAt": int((today - timedelta(days=2)).timestamp() * 1000),
            "packetData": {
                "systemInfo": {"name": "Furnace", "age": 12, "manufacturer": "Carrier"},
                "diagnosis": {
                    "likelyIssue": "Igniter failure",
                    "confidence": 70,
                    "explanation": "The blower runs but the burners never light.",
                    "alternativeCauses": ["Flame sensor", "Gas valve"],
                },
                "costEstimate": {"diyLow": 30, "diyHigh": 60, "proLow": 150, "proHigh": 350},
                "questionsToAsk": ["Is the igniter covered by warranty?"],
                "redFlags": ["Quotes to replace the whole furnace for a single part"],
            },
        }
    )
    backend.set_bundle_progress(
        home_id,
        {
            "currentPoints": 120,
            "lifetimePoints": 340,
            "nextBundle": {"name": "HVAC Health Bundle", "remainingPoints": 80, "progressPercent": 60},
            "bundles": [
                {"key": "hvac", "name": "HVAC Health Bundle", "achievedAt": None},
                {"key": "safety", "name": "Safety Health Bundle", "achievedAt": 1},
            ],
        },
    )
    for years, total in ((1, 2400), (5, 14800), (10, 31500)):
        backend.set_forecast(
            home_id,
            years,
            {
                "summary": {"total": total, "perMonth": total / (12 * years), "perPaycheck": total / (26 * years)},
                "totals": {
                    "grandTotal": total,
                    "maintenance": total * 0.3,
                    "repairs": total * 0.3,
                    "replacements": total * 0.4,
                },
                "insights": {
                    "totalDiySavings": 420 * years,
                    "peakYear": today.year + years - 1,
                    "peakAmount": total / years * 1.5,
                    "biggestExpense": {"name": "Furnace replacement", "cost": 5200},
                    "upcomingReplacements": [{"name": "Roof", "year": today.year + 9}],
                },
                "yearlyBreakdown": [
                    {
                        "year": today.year + offset,
                        "total": total / years,
                        "maintenance": total / years * 0.3,
                        "repairs": total / years * 0.3,
                        "replacements": total / years * 0.4,
                    }
                    for offset in range(years)
                ],
            },
        )
    backend.set_confidence(
        home_id,
        {
            "score": 64,
            "level": "medium",
            "description": "Add install dates to sharpen the forecast.",
            "topImprovements": [
                {"suggestion": "Add the roof install date", "potentialGain": 12},
                {"suggestion": "Add your AC system", "potentialGain": 8},
            ],
        },
    )
    backend.set_subscription({"tier": "free", "status": ""})
    backend.calls.clear()
    return backend


__all__ = ["SYSTEM_TYPES", "build_demo_backend"]
