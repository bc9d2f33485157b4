"""Sommelier lookup tables used by the rule-based scorer."""
from __future__ import annotations

from ..recommendations.models import Intensity, Preparation, Protein, Season, WineType

PREFERRED_TYPE: dict[Protein, WineType] = {
    Protein.beef: WineType.red,
    Protein.lamb: WineType.red,
    Protein.game: WineType.red,
    Protein.pork: WineType.red,
    Protein.poultry: WineType.white,
    Protein.fish: WineType.white,
    Protein.shellfish: WineType.white,
    Protein.vegetarian: WineType.white,
}

# Preparation changes the preferred style for some proteins.
PREPARATION_OVERRIDES: dict[tuple[Protein, Preparation], WineType] = {
    (Protein.pork, Preparation.poached): WineType.white,
    (Protein.pork, Preparation.steamed): WineType.white,
    (Protein.poultry, Preparation.grilled): WineType.rose,
    (Protein.poultry, Preparation.braised): WineType.red,
    (Protein.poultry, Preparation.stewed): WineType.red,
    (Protein.fish, Preparation.seared): WineType.rose,
    (Protein.fish, Preparation.smoked): WineType.rose,
    (Protein.fish, Preparation.fried): WineType.sparkling,
    (Protein.shellfish, Preparation.raw): WineType.sparkling,
    (Protein.shellfish, Preparation.fried): WineType.sparkling,
    (Protein.vegetarian, Preparation.roasted): WineType.rose,
    (Protein.vegetarian, Preparation.grilled): WineType.rose,
}

ADJACENT_TYPES: dict[WineType, frozenset[WineType]] = {
    WineType.red: frozenset({WineType.rose}),
    WineType.white: frozenset({WineType.rose, WineType.sparkling}),
    WineType.rose: frozenset({WineType.red, WineType.white, WineType.sparkling}),
    WineType.sparkling: frozenset({WineType.white, WineType.rose}),
    WineType.dessert: frozenset({WineType.fortified, WineType.sparkling}),
    WineType.fortified: frozenset({WineType.dessert, WineType.red}),
}

# Dish tokens that signal a flavour tag.
DISH_FLAVOR_KEYWORDS: dict[str, frozenset[str]] = {
    "citrus": frozenset({"lemon", "lime", "orange", "citrus", "yuzu", "grapefruit"}),
    "herb": frozenset({"herb", "basil", "thyme", "rosemary", "parsley", "dill", "tarragon", "oregano", "mint", "sage"}),
    "rich": frozenset({"cream", "creamy", "butter", "cheese", "braised", "rib", "fatty", "confit", "gravy", "duck"}),
    "spicy": frozenset({"chili", "chilli", "spicy", "curry", "jalapeno", "harissa", "sriracha"}),
    "sweet": frozenset({"honey", "sweet", "caramel", "glazed", "maple", "chocolate", "dessert"}),
    "delicate": frozenset({"delicate", "steamed", "poached", "raw", "crudo", "ceviche", "sashimi", "oyster"}),
    "umami": frozenset({"mushroom", "soy", "miso", "parmesan", "truffle", "tomato", "umami", "seaweed"}),
    "smoky": frozenset({"smoked", "smoky", "barbecue", "bbq", "charred"}),
}

# Tasting-note substrings grouped into flavour families.
WINE_FLAVOR_FAMILIES: dict[str, tuple[str, ...]] = {
    "fruit": ("berry", "cherry", "cassis", "blackberry", "plum", "apple", "pear", "peach",
              "apricot", "citrus", "lemon", "lime", "orange", "tropical"),
    "earth": ("mineral", "stone", "earth", "soil", "graphite", "truffle", "mushroom"),
    "spice": ("pepper", "spice", "herb", "cedar", "oak", "anise", "clove"),
    "floral": ("floral", "rose", "violet", "blossom"),
    "sweet": ("honey", "caramel", "toffee"),
    "nutty": ("almond", "hazelnut", "nut", "walnut"),
    "smoky": ("smoke", "smoky", "toast"),
}

COMPLEMENTARY: dict[str, frozenset[str]] = {
    "citrus": frozenset({"crisp", "light", "earth"}),
    "herb": frozenset({"earth", "spice"}),
    "rich": frozenset({"full", "tannic", "sweet", "smooth"}),
    "spicy": frozenset({"sweet", "fruit", "spice"}),
    "sweet": frozenset({"sweet", "fruit", "smooth"}),
    "delicate": frozenset({"light", "floral", "crisp"}),
    "umami": frozenset({"earth", "spice", "tannic"}),
    "smoky": frozenset({"smoky", "spice", "full"}),
}

CONFLICTING: dict[str, frozenset[str]] = {
    "delicate": frozenset({"tannic", "full"}),
    "sweet": frozenset({"tannic"}),
    "spicy": frozenset({"tannic"}),
    "citrus": frozenset({"tannic"}),
}

FULL_BODIED_GRAPES = frozenset(
    {
        "cabernet sauvignon", "syrah", "shiraz", "malbec", "nebbiolo", "tempranillo",
        "zinfandel", "primitivo", "petit verdot", "aglianico", "mourvedre", "touriga nacional",
        "xinomavro", "agiorgitiko", "viognier", "marsanne",
    }
)
LIGHT_BODIED_GRAPES = frozenset(
    {
        "pinot noir", "gamay", "riesling", "sauvignon blanc", "pinot grigio", "pinot gris",
        "albarino", "muscadet", "gruner veltliner", "assyrtiko", "vermentino", "verdejo",
        "chenin blanc", "moschofilero",
    }
)

BODY_BY_TYPE: dict[WineType, str] = {
    WineType.red: "medium",
    WineType.white: "light",
    WineType.rose: "light",
    WineType.sparkling: "light",
    WineType.dessert: "full",
    WineType.fortified: "full",
}

BODY_LEVEL = {"light": 0, "medium": 1, "full": 2}
INTENSITY_LEVEL = {Intensity.light: 0, Intensity.medium: 1, Intensity.rich: 2}

PREPARATION_INTENSITY: dict[Preparation, Intensity] = {
    Preparation.raw: Intensity.light,
    Preparation.steamed: Intensity.light,
    Preparation.poached: Intensity.light,
    Preparation.grilled: Intensity.medium,
    Preparation.seared: Intensity.medium,
    Preparation.fried: Intensity.medium,
    Preparation.sauteed: Intensity.medium,
    Preparation.baked: Intensity.medium,
    Preparation.roasted: Intensity.rich,
    Preparation.braised: Intensity.rich,
    Preparation.stewed: Intensity.rich,
    Preparation.smoked: Intensity.rich,
}

PROTEIN_INTENSITY: dict[Protein, Intensity] = {
    Protein.beef: Intensity.rich,
    Protein.lamb: Intensity.rich,
    Protein.game: Intensity.rich,
    Protein.pork: Intensity.medium,
    Protein.poultry: Intensity.medium,
    Protein.fish: Intensity.light,
    Protein.shellfish: Intensity.light,
    Protein.vegetarian: Intensity.light,
}

# cuisine -> (canonical regions, canonical countries)
CUISINE_TRADITIONS: dict[str, tuple[frozenset[str], frozenset[str]]] = {
    "french": (
        frozenset({"burgundy", "bordeaux", "loire", "rhone", "champagne", "provence", "alsace", "languedoc", "chablis"}),
        frozenset({"france"}),
    ),
    "italian": (
        frozenset({"tuscany", "piedmont", "veneto", "sicily", "chianti", "barolo", "friuli", "campania"}),
        frozenset({"italy"}),
    ),
    "spanish": (
        frozenset({"rioja", "ribera del duero", "priorat", "rias baixas", "jerez", "rueda"}),
        frozenset({"spain"}),
    ),
    "portuguese": (
        frozenset({"douro", "vinho verde", "alentejo", "dao"}),
        frozenset({"portugal"}),
    ),
    "greek": (
        frozenset({"santorini", "naoussa", "nemea", "crete", "macedonia"}),
        frozenset({"greece"}),
    ),
    "german": (
        frozenset({"mosel", "rheingau", "pfalz", "nahe"}),
        frozenset({"germany"}),
    ),
    "austrian": (
        frozenset({"wachau", "kamptal", "kremstal", "burgenland"}),
        frozenset({"austria"}),
    ),
    "american": (
        frozenset({"california", "napa valley", "sonoma", "oregon", "washington"}),
        frozenset({"united states", "usa"}),
    ),
    "mediterranean": (
        frozenset({"provence", "sicily", "santorini", "priorat"}),
        frozenset({"greece", "italy", "spain", "france"}),
    ),
    "thai": (frozenset({"mosel", "alsace"}), frozenset()),
    "indian": (frozenset({"alsace", "mosel"}), frozenset()),
    "japanese": (frozenset({"champagne", "chablis"}), frozenset()),
    "chinese": (frozenset({"alsace", "mosel"}), frozenset()),
    "mexican": (frozenset({"rioja", "california"}), frozenset()),
}

SEASONAL_PREFERENCES: dict[Season, dict[str, float]] = {
    Season.spring: {"light_white": 0.9, "crisp_white": 0.8, "rose": 0.8, "sparkling": 0.8, "light_red": 0.7},
    Season.summer: {"crisp_white": 1.0, "rose": 0.9, "sparkling": 0.9, "light_white": 0.9, "light_red": 0.6},
    Season.autumn: {"medium_red": 0.9, "full_red": 0.8, "full_white": 0.8, "dessert": 0.7},
    Season.winter: {"full_red": 1.0, "fortified": 0.8, "medium_red": 0.8, "full_white": 0.7, "dessert": 0.7},
}
