"""Prompt builders for generator calls.

Every structured prompt asks for JSON only; the matching reply schemas live
in vivot.app.models.generated.
"""

from datetime import date

from vivot.app.models.activity import Activity
from vivot.app.models.pivot import PivotContext
from vivot.app.models.preferences import UserPreferences
from vivot.app.models.trip import Trip

ITINERARY_SCHEMA = """{
  "response": "Short warm summary",
  "trip": {
    "destination": "City, Country",
    "coordinates": {"lat": 0.0, "lng": 0.0},
    "startDate": "YYYY-MM-DD",
    "endDate": "YYYY-MM-DD",
    "budget": number,
    "activities": [
      {
        "day": 1,
        "title": "Activity title",
        "description": "Vivid description",
        "category": "activity|restaurant|accommodation|transport",
        "time": "HH:MM",
        "duration": "X hours",
        "location": "Place name",
        "coordinates": {"lat": 0.0, "lng": 0.0},
        "imageKeyword": "search keyword for a photo",
        "cost": number,
        "orderIndex": 0,
        "shadowOption": {
          "title": "Low-energy alternative",
          "description": "...",
          "category": "activity|restaurant",
          "time": "HH:MM",
          "duration": "X hours",
          "location": "Place name",
          "coordinates": {"lat": 0.0, "lng": 0.0},
          "cost": number
        }
      }
    ]
  }
}"""

PIVOT_SCHEMA = """{
  "proposal": "One or two sentences explaining the change",
  "newActivity": {
    "title": "...",
    "description": "...",
    "category": "activity|restaurant|accommodation|transport",
    "location": "...",
    "cost": number,
    "duration": "..."
  }
}"""

CARE_PLAN_SCHEMA = """{
  "condition": "...",
  "personalPlan": [
    {
      "title": "...",
      "description": "...",
      "recommendedDuration": "...",
      "placeType": "...",
      "imageKeyword": "...",
      "coordinates": {"lat": 0, "lng": 0}
    }
  ],
  "groupPlan": [
    {
      "title": "...",
      "description": "...",
      "recommendedAdjustment": "...",
      "reasoning": "...",
      "imageKeyword": "..."
    }
  ],
  "recheckInMinutes": 30
}"""


def build_itinerary_system_prompt(preferences: UserPreferences | None, today: date) -> str:
    """System prompt for chat-driven trip generation."""
    lines = [
        "You are VIVOT, a travel assistant that builds adaptive, wellness-aware itineraries.",
        "",
        f"Today's date is {today.isoformat()}. Trip dates must be today or later.",
        "",
    ]

    if preferences is not None:
        lines.append("User preferences:")
        lines.append(f"- Budget: {preferences.budget}")
        lines.append(f"- Interests: {', '.join(preferences.interests) or 'general'}")
        lines.append(f"- Dietary: {', '.join(preferences.dietary) or 'none'}")
        lines.append(f"- Pace: {preferences.pace}")
        lines.append(f"- Travel style: {preferences.travel_style}")
        lines.append("")

    lines.append("When the user asks for a trip plan, respond ONLY with JSON of this shape:")
    lines.append(ITINERARY_SCHEMA)
    lines.append("")
    lines.append("When the user is just chatting, respond with JSON {\"response\": \"...\"} only.")
    lines.append("")
    lines.append("Rules:")
    lines.append("1. Give every activity realistic coordinates and an imageKeyword.")
    lines.append("2. Strenuous activities must carry a shadowOption.")
    lines.append("3. Costs are per group, in the trip currency, never negative.")
    lines.append("4. JSON only, no prose outside the JSON object.")

    return "\n".join(lines)


def build_pivot_prompt(activity: Activity, context: PivotContext) -> str:
    """User prompt asking for one lower-energy replacement activity."""
    budget = (
        f"${context.budget_remaining:.2f}" if context.budget_remaining is not None else "unknown"
    )
    return "\n".join(
        [
            f"The group is feeling {context.group_mood or 'low'} energy.",
            "",
            f"Current planned activity: {activity.title} ({activity.category.value})"
            f" at {context.time or activity.time or 'unknown time'}.",
            f"Location: {context.location or activity.location or 'unknown'}",
            f"Budget remaining: {budget}",
            "",
            "Propose one calmer replacement that fits the remaining budget.",
            "Respond ONLY with JSON of this shape:",
            PIVOT_SCHEMA,
        ]
    )


def build_care_plan_prompt(trip: Trip, condition: str, activity: Activity | None) -> str:
    """User prompt for a Care Mode wellness micro-itinerary."""
    current = activity.title if activity is not None else "general sightseeing"
    return "\n".join(
        [
            f'A traveller reported: "{condition}"',
            f"Trip destination: {trip.destination}",
            f"Current activity: {current}",
            "",
            "Build a wellness micro-itinerary. The personal plan must be calm and safe;",
            "the group plan should change the trip as little as possible.",
            "Respond ONLY with JSON of this shape:",
            CARE_PLAN_SCHEMA,
        ]
    )


def build_adaptation_prompt(
    activities: list[Activity],
    weather: str | None,
    time: str | None,
    budget_remaining: float | None,
) -> str:
    """Free-text prompt asking for itinerary adaptations."""
    lines = ["Given the current itinerary and context, suggest adaptations.", ""]
    lines.append("Current activities:")
    if activities:
        for a in activities:
            lines.append(f"- Day {a.day} {a.time}: {a.title} at {a.location} (${a.cost:.2f})")
    else:
        lines.append("- No activities planned")
    lines.append("")
    lines.append("Context:")
    lines.append(f"- Weather: {weather or 'unknown'}")
    lines.append(f"- Current time: {time or 'unknown'}")
    budget = f"${budget_remaining:.2f}" if budget_remaining is not None else "unknown"
    lines.append(f"- Budget remaining: {budget}")
    lines.append("")
    lines.append("Provide 2-3 practical alternatives that fit these conditions.")
    return "\n".join(lines)
