"""
Default registry contents: the conference itinerary, the per-category rule
catalog and the package catalog.

Documents are kept in the registry's stored shape (camelCase keys, and a
few rules still holding a bare linked-itinerary id).
"""

from typing import Any, Dict, List

from .store import RegistryStore

PACKAGES_DOC = "packagePermissions"
RULES_DOC = "categoryPermissions"


def _event(id, date, time, title, location, description, category):
    return {
        "id": id, "date": date, "time": time, "title": title, "location": location,
        "description": description, "category": category, "permissionId": category,
    }


DEFAULT_SCHEDULE: List[Dict[str, Any]] = [
    _event("E1", "27.03.2026", "All Day", "Arrival & Registration", "Hotel Lobby", "Welcoming delegates.", "Social"),
    _event("E2", "27.03.2026", "All Day", "JCI Asia-Pacific Academy (full day)", "TBC", "Academy training sessions.", "Conference"),
    _event("E3", "28.03.2026", "All Day", "Arrival & Registration", "Hotel Lobby", "Welcoming delegates.", "Social"),
    _event("E4", "28.03.2026", "All Day", "JCI Asia-Pacific Academy (full day)", "TBC", "Academy training sessions.", "Conference"),
    _event("E5", "29.03.2026", "07:00 AM", "Breakfast", "Furama Hotel", "Morning gathering.", "Social"),
    _event("E6", "29.03.2026", "09:00 AM", "National President's Meeting", "Andaman", "Leadership coordination.", "Conference"),
    _event("E7", "29.03.2026", "12:00 PM", "National President's Luncheon", "Andaman", "Exclusive luncheon for presidents.", "Social"),
    _event("E8", "29.03.2026", "02:00 PM", "Asia Pacific Development Council Meeting", "Furama Hotel", "Council session.", "Conference"),
    _event("E9", "29.03.2026", "03:30 PM", "ASPAC Senate", "Furama Hotel", "Senate session.", "Conference"),
    _event("E10", "29.03.2026", "05:00 PM", "Board Meeting", "Andaman", "Strategic board review.", "Conference"),
    _event("E11", "29.03.2026", "07:00 PM", "Welcoming Dinner", "Andaman Grand ballroom", "Official opening ceremony.", "Dinner"),
    _event("E12", "30.03.2026", "07:00 AM", "Breakfast", "Furama Hotel", "Start your day right.", "Social"),
    _event("E13", "30.03.2026", "08:00 AM", "Golf Tournament Day 1", "Templer Park Golf & Country Club", "Competitive round 1.", "Golf"),
    _event("E14", "30.03.2026", "09:00 AM", "APDC Training & Forum", "Furama Hotel", "Knowledge sharing session.", "Conference"),
    _event("E15", "30.03.2026", "10:00 AM", "Excursion Day 1", "KL City", "Exploring Kuala Lumpur.", "Social"),
    _event("E16", "30.03.2026", "06:00 PM", "VIP Dinner", "TBC", "Exclusive VIP gathering.", "Dinner"),
    _event("E17", "30.03.2026", "08:00 PM", "JCI in Business", "Andaman Grand ballroom", "Business networking night.", "Conference"),
    _event("E18", "31.03.2026", "07:00 AM", "Breakfast", "Furama Hotel", "Final day breakfast.", "Social"),
    _event("E19", "31.03.2026", "08:00 AM", "Golf Tournament Day 2", "Kota Permai Golf Club", "Final competition round.", "Golf"),
    _event("E20", "31.03.2026", "10:00 AM", "Excursion Day 2", "KL Environs", "Regional exploration.", "Social"),
    _event("E21", "31.03.2026", "07:00 PM", "Farewell & Awards Night", "Andaman Grand ballroom", "Closing ceremony and awards.", "Dinner"),
]

DEFAULT_CATEGORY_RULES: Dict[str, List[Dict[str, Any]]] = {
    "APDC": [
        {"id": "apdc_mar28_hotel", "name": "Hotel", "date": "28 Mar 2026"},
        {"id": "apdc_mar29_full", "name": "Breakfast, All Meeting, Lunch, Welcome Dinner, Hotel", "date": "29 Mar 2026",
         "linkedItinerary": ["E5", "E6", "E7", "E8", "E9", "E10", "E11"]},
        {"id": "apdc_mar30_full", "name": "Breakfast, Lunch, APDC Training, Hotel", "date": "30 Mar 2026",
         "linkedItinerary": ["E12", "E14"]},
        {"id": "apdc_mar31_full", "name": "Breakfast, Excursion, GALA Dinner, Hotel", "date": "31 Mar 2026",
         "linkedItinerary": ["E18", "E20", "E21"]},
        {"id": "apdc_apr01_brk", "name": "Breakfast", "date": "01 Apr 2026"},
    ],
    "JCIM": [
        {"id": "my_day1_golf", "name": "Day 1 Golf", "date": "30 Mar 2026", "golfType": "Day1", "linkedItinerary": "E13"},
        {"id": "my_day2_golf", "name": "Day 2 Golf", "date": "31 Mar 2026", "golfType": "Day2", "linkedItinerary": "E19"},
        {"id": "my_welcome", "name": "Welcoming Night", "date": "29 Mar 2026", "linkedItinerary": "E11"},
        {"id": "my_gala", "name": "GALA Night", "date": "31 Mar 2026", "linkedItinerary": "E21"},
        {"id": "my_day1_meet", "name": "Day 1 Meeting", "date": "29 Mar 2026",
         "linkedItinerary": ["E6", "E8", "E9", "E10"]},
    ],
    "Int": [
        {"id": "int_day1_golf", "name": "Day 1 Golf", "date": "30 Mar 2026", "golfType": "Day1", "linkedItinerary": ["E13"]},
        {"id": "int_day2_golf", "name": "Day 2 Golf", "date": "31 Mar 2026", "golfType": "Day2", "linkedItinerary": ["E19"]},
        {"id": "int_day1_hotel", "name": "Day 1 Hotel", "date": "27 Mar 2026"},
        {"id": "int_day2_hotel", "name": "Day 2 Hotel", "date": "28 Mar 2026"},
        {"id": "int_day3_hotel", "name": "Day 3 Hotel", "date": "29 Mar 2026"},
        {"id": "int_pass_29", "name": "All Access Day Pass (Welcome Night)", "date": "29 Mar 2026",
         "linkedItinerary": ["E5", "E6", "E7", "E8", "E9", "E10", "E11"]},
        {"id": "int_pass_30", "name": "All Access Day Pass", "date": "30 Mar 2026",
         "linkedItinerary": ["E12", "E13", "E14", "E15", "E16", "E17"]},
        {"id": "int_pass_31", "name": "All Access Day Pass (Farewell Night)", "date": "31 Mar 2026",
         "linkedItinerary": ["E18", "E19", "E20", "E21"]},
        {"id": "int_pass_multi", "name": "All Access Day Pass (Mar 29-31)", "date": "29-31 Mar 2026"},
    ],
    "JP": [],
    "KR": [],
    "VIP": [],
}


def _all_granted(category: str) -> Dict[str, Any]:
    return {
        "category": category,
        "permissions": {rule["id"]: True for rule in DEFAULT_CATEGORY_RULES.get(category, [])},
    }


DEFAULT_PACKAGES: Dict[str, Dict[str, Any]] = {
    **{code: _all_granted("Int") for code in ("G3", "G2", "N3", "N2", "N1", "D11", "D12", "D13", "D3A")},
    **{code: _all_granted("APDC") for code in ("APDC Option 1", "APDC Option 2")},
    **{code: _all_granted("JCIM") for code in (
        "Day 1 Meeting Access", "Welcome Dinner", "GALA Dinner", "3 in 1 Events Pass",
        "2 in 1 Event Pass A", "2 in 1 Event Pass B", "2 in 1 Event Pass C",
        "1st & 2nd Golfer", "2nd Day Golfer",
    )},
    "G3jp": _all_granted("JP"),
    "G3a": _all_granted("KR"),
    "G3b": _all_granted("KR"),
}

DEFAULT_DELEGATES: List[Dict[str, Any]] = [
    {
        "id": "G3jp-0001-JP",
        "nameOnTag": "KENJI",
        "name": "Tanaka Kenji",
        "gender": "Male",
        "position": "Delegate",
        "country": "Japan",
        "localOrg": "JCI Osaka",
        "package": "G3jp",
        "email": "tanaka@jci.jp",
        "phone": "+81 90-1234-5678",
        "isGolfParticipant": True,
        "passportLast4": "1234",
        "checkInCount": 0,
    },
]


def seed_defaults(store: RegistryStore) -> bool:
    """Load the defaults into an empty registry. Returns False if delegates exist."""
    if store.get_all("delegates"):
        return False

    with store.batch() as batch:
        for delegate in DEFAULT_DELEGATES:
            batch.set("delegates", delegate["id"], delegate)
        for event in DEFAULT_SCHEDULE:
            batch.set("events", event["id"], event)
        batch.set("config", PACKAGES_DOC, {"id": PACKAGES_DOC, "data": DEFAULT_PACKAGES})
        batch.set("config", RULES_DOC, {"id": RULES_DOC, "data": DEFAULT_CATEGORY_RULES})

    store.logger.info(
        "Registry seeded",
        delegates=len(DEFAULT_DELEGATES),
        events=len(DEFAULT_SCHEDULE),
        packages=len(DEFAULT_PACKAGES)
    )
    return True
