"""Topic taxonomy used to tag code titles and chapters.

Keys are topic tags; values are the keywords that select them. Matching is a
case-insensitive substring test, so short keywords ("bar", "pet") match broadly.
"""

TAXONOMY: dict[str, list[str]] = {
    "noise": ["noise", "loud", "sound", "quiet hours", "decibel", "peace", "morals"],
    "parking": ["parking", "vehicle", "traffic", "street parking", "overnight", "motor vehicle"],
    "pets": ["animal", "dog", "cat", "pet", "license", "barking"],
    "building": [
        "building",
        "construction",
        "permit",
        "inspection",
        "structural",
        "electrical",
        "plumbing",
    ],
    "adu": ["accessory dwelling", "ADU", "granny", "secondary unit", "in-law"],
    "zoning": ["zoning", "land use", "setback", "density", "lot coverage", "height limit"],
    "rental": ["rent", "tenant", "landlord", "eviction", "just cause", "relocation"],
    "cannabis": ["cannabis", "marijuana", "dispensary", "cultivation"],
    "trees": ["tree", "heritage tree", "protected tree", "removal", "urban forest"],
    "health": ["health", "safety", "sanitation", "nuisance", "abatement"],
    "business": ["business license", "home occupation", "commercial", "vendor", "food truck"],
    "signs": ["sign", "signage", "banner", "advertising", "billboard"],
    "fences": ["fence", "wall", "property line", "hedge"],
    "fire": ["fire", "fire code", "sprinkler", "alarm", "emergency"],
    "utilities": ["water", "sewer", "garbage", "trash", "recycling", "utility"],
    "subdivision": ["subdivision", "parcel", "lot split", "map"],
    "environmental": ["environmental", "stormwater", "erosion", "grading", "CEQA"],
    "historic": ["historic", "preservation", "landmark", "heritage"],
    "alcohol": ["alcohol", "liquor", "ABC", "bar", "nightclub"],
    "shortterm": ["short-term", "airbnb", "vacation rental", "VRBO", "transient"],
}

TOPIC_TAGS: tuple[str, ...] = tuple(TAXONOMY)
