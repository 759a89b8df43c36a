"""Default roster of rush customers for the scripted agent and demo."""

from barista_rush.schemas.session_schema import CustomerProfile

DEFAULT_CUSTOMERS: list[CustomerProfile] = [
    CustomerProfile(
        instance_id="customer-1",
        name="Mobile Order Maya",
        lines=[
            "Hey, my mobile order's stuck on Ready. What's taking so long?",
            "The app said it would be ready ten minutes ago.",
        ],
    ),
    CustomerProfile(
        instance_id="customer-2",
        name="Slow Line Sam",
        lines=[
            "I've been here 10 minutes waiting for a latte, this is ridiculous.",
            "And there's nowhere to sit, every table is taken.",
        ],
    ),
    CustomerProfile(
        instance_id="customer-3",
        name="Wrong Name Nadia",
        lines=[
            "You spelled my name wrong again!",
        ],
    ),
    CustomerProfile(
        instance_id="customer-4",
        name="Cold Brew Colin",
        lines=[
            "My drink's ice cold. Can you fix it?",
        ],
    ),
    CustomerProfile(
        instance_id="customer-5",
        name="Milk Mix-up Priya",
        lines=[
            "I asked for almond milk, not soy.",
            "I'm lactose intolerant, so this really matters to me.",
        ],
    ),
]
