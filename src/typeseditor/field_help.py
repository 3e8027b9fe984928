"""Help text for the tips pane, keyed by element or attribute name."""

from __future__ import annotations

from typeseditor.models import AttributeKey, ElementKey, FieldKey

_FLAG_SUFFIX = (
    "\nIf set to 1, the item won't spawn while a nominal number of items "
    "counted by this flag already exists."
)

ELEMENT_HELP: dict[str, str] = {
    "nominal": "The nominal (wanted) amount on the server. Same as max if max is not used.",
    "lifetime": (
        "Seconds until the item despawns while lying on the ground.\n"
        "Does not apply if the item is ruined."
    ),
    "restock": (
        "Seconds after one of these items despawns or is picked up "
        "before a new one is spawned."
    ),
    "min": "Minimum number of these items to spawn across the whole map.",
    "quantmin": "Minimum stack quantity when spawned, e.g. rounds in an ammo stack.",
    "quantmax": "Maximum stack quantity when spawned, e.g. rounds in an ammo stack.",
    "cost": "Loot spawning prioritizer.",
    "category": "The location class where this item can spawn.",
    "usage": "The location class where this item can spawn.",
    "tag": "The location class where this item can spawn.",
    "value": "The map tier where this item can spawn.",
    "flags": "",
}

ATTRIBUTE_HELP: dict[str, str] = {
    "count_in_cargo": "Boolean flag. Counts items in cargo (tents, boxes, vehicles)." + _FLAG_SUFFIX,
    "count_in_hoarder": "Boolean flag. Counts items carried by zombies." + _FLAG_SUFFIX,
    "count_in_map": "Boolean flag. Counts items lying on the map." + _FLAG_SUFFIX,
    "count_in_player": "Boolean flag. Counts items carried by players." + _FLAG_SUFFIX,
    "crafted": "Boolean flag. Counts crafted items." + _FLAG_SUFFIX,
    "deloot": "Boolean flag. Counts items from dynamic events such as helicopter crashes." + _FLAG_SUFFIX,
    "name": "The location class where this item can spawn.",
}


def help_text(key: FieldKey) -> str:
    if isinstance(key, ElementKey):
        return ELEMENT_HELP.get(key.name, f"Unknown field: {key.name}")
    if isinstance(key, AttributeKey):
        return ATTRIBUTE_HELP.get(key.attr, f"Unknown attribute: {key.attr}")
    return ""
