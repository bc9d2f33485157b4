import asyncio

import pytest

from winepair.recommendations.models import DishContext, WineCandidate

WINES = {
    "chablis": WineCandidate(
        wine_id="w002", vintage_id="v2020", name="Chablis Premier Cru", producer="William Fevre",
        year=2020, type="white", region="Chablis", country="France", grape_varieties={"Chardonnay"},
        style="Crisp", tasting_notes="Mineral, green apple, lemon zest and oyster shell",
        food_pairings=("oysters", "grilled fish", "goat cheese"), available_quantity=12,
    ),
    "sancerre": WineCandidate(
        wine_id="w004", vintage_id="v2021", name="Sancerre", producer="Domaine Vacheron",
        year=2021, type="white", region="Loire", country="France", grape_varieties={"Sauvignon Blanc"},
        style="Crisp", tasting_notes="Citrus, gooseberry, herb and flinty mineral finish",
        food_pairings=("goat cheese", "shellfish", "asparagus"), available_quantity=9,
    ),
    "cabernet": WineCandidate(
        wine_id="w003", vintage_id="v2018", name="Napa Cabernet Sauvignon", producer="Heitz Cellar",
        year=2018, type="red", region="Napa Valley", country="United States",
        grape_varieties={"Cabernet Sauvignon"}, style="Full-bodied",
        tasting_notes="Cassis, blackberry, cedar and firm tannin",
        food_pairings=("ribeye", "lamb chops", "hard cheese"), available_quantity=4,
    ),
    "barolo": WineCandidate(
        wine_id="w001", vintage_id="v2019", name="Barolo Riserva", producer="Giacomo Conterno",
        year=2019, type="red", region="Piedmont", country="Italy", grape_varieties={"Nebbiolo"},
        style="Full-bodied", tasting_notes="Tannic, dried cherry, rose petal, tar and earth",
        food_pairings=("braised beef", "truffle risotto", "game"), available_quantity=6,
    ),
    "rose": WineCandidate(
        wine_id="w005", vintage_id="v2022", name="Cotes de Provence Rose", producer="Chateau d'Esclans",
        year=2022, type="rose", region="Provence", country="France",
        grape_varieties={"Grenache", "Cinsault"}, style="Light",
        tasting_notes="Strawberry, peach and white blossom",
        food_pairings=("salade nicoise", "grilled chicken"), available_quantity=15,
    ),
    "riesling": WineCandidate(
        wine_id="w008", vintage_id="v2019", name="Riesling Spatlese", producer="Dr. Loosen",
        year=2019, type="white", region="Mosel", country="Germany", grape_varieties={"Riesling"},
        style="Light", tasting_notes="Peach, apricot, honey and slate mineral",
        food_pairings=("thai curry", "spicy noodles"), available_quantity=10,
    ),
}

SEAFOOD = DishContext(
    description="Grilled sea bass with lemon and herbs",
    protein="fish",
    preparation="grilled",
    cuisine="Mediterranean",
    season="summer",
)

RED_MEAT = DishContext(
    description="Braised beef short ribs in red wine sauce",
    protein="beef",
    preparation="braised",
    cuisine="French",
    season="winter",
    guest_count=6,
)


class StubProvider:
    """Reasoning provider double with a call counter."""

    def __init__(self, name, reply=None, exc=None, delay=0.0, timeout=1.0):
        self.name = name
        self.reply = reply
        self.exc = exc
        self.delay = delay
        self.timeout = timeout
        self.calls = 0

    async def complete(self, system_prompt, user_message):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.reply


GOOD_REPLY = '{"reasoning": "Bright acidity lifts the dish.", "adjustment": 0.1}'


@pytest.fixture
def wines():
    return dict(WINES)


@pytest.fixture
def provider():
    return StubProvider


@pytest.fixture
def seafood():
    return SEAFOOD


@pytest.fixture
def red_meat():
    return RED_MEAT


@pytest.fixture
def good_reply():
    return GOOD_REPLY
