"""
The Contoso Pizza Company sample app: intent, entity tree, phrase list,
one labeled utterance and the prediction query.
"""

from luis_quickstart.core.luis.types import EntityLabel, EntityNode, LabeledExample, PhraseList

INTENT_NAME = "OrderPizzaIntent"
PREBUILT_ENTITIES = ["number"]

ML_ENTITY_NAME = "Pizza order"
PHRASE_LIST_NAME = "QuantityPhraselist"

# (child, grandchild) paths of the sub-entities that receive features
PIZZA_QUANTITY = ("Pizza", "Quantity")
TOPPINGS_QUANTITY = ("Toppings", "Quantity")

EXAMPLE_TEXT = "I want two small seafood pizzas with extra cheese."
PREDICTION_QUERY = "I want two small pepperoni pizzas with more salsa"
PREDICTION_SLOT = "Production"


def build_entity_definition() -> EntityNode:
    """Pizza order -> {Pizza -> {Quantity, Type, Size}, Toppings -> {Type, Quantity}}"""
    return EntityNode(
        name=ML_ENTITY_NAME,
        children=[
            EntityNode("Pizza", children=[
                EntityNode("Quantity"),
                EntityNode("Type"),
                EntityNode("Size"),
            ]),
            EntityNode("Toppings", children=[
                EntityNode("Type"),
                EntityNode("Quantity"),
            ]),
        ],
    )


def build_phrase_list() -> PhraseList:
    return PhraseList(
        name=PHRASE_LIST_NAME,
        phrases=["few", "more", "extra"],
        is_exchangeable=True,
        enabled_for_all_models=False,
    )


def build_labeled_example(intent_name: str = INTENT_NAME) -> LabeledExample:
    """
    Label EXAMPLE_TEXT against the entity tree.

    Offsets are character indexes into EXAMPLE_TEXT, end inclusive:
    "two" is 7..9, "extra cheese" is 37..48.
    """
    return LabeledExample(
        text=EXAMPLE_TEXT,
        intent_name=intent_name,
        entity_labels=[
            EntityLabel(ML_ENTITY_NAME, 7, 48, children=[
                EntityLabel("Pizza", 7, 30, children=[
                    EntityLabel("Quantity", 7, 9),
                    EntityLabel("Size", 11, 15),
                    EntityLabel("Type", 17, 23),
                ]),
                EntityLabel("Toppings", 37, 48, children=[
                    EntityLabel("Quantity", 37, 41),
                    EntityLabel("Type", 43, 48),
                ]),
            ]),
        ],
    )
