"""
Reply templates for the operator's two choices.

Cooperative ("good") templates take a ``{suffix}`` placeholder that is
filled with ", <name>" when the customer's name is known. Dismissive
("bad") templates are never personalized.
"""

from barista_rush.schemas.classification_schema import IssueTag

# --- Cooperative replies ---

GOOD_MULTIPLE = (
    "I can see there are a few things going on here{suffix}. "
    "Let me address each of these concerns for you."
)
GOOD_HIGH_EMOTION = (
    "I can see this is really frustrating for you{suffix}, and I completely "
    "understand. Let me take care of this personally."
)
GOOD_HIGH_URGENCY = (
    "I can see this needs immediate attention{suffix}. "
    "Let me handle this right now."
)
GOOD_ORDER_DELAY_LONG_WAIT = (
    "I see you've been waiting quite a while{suffix}. "
    "Let me check on your order status immediately and get it expedited."
)
GOOD_TEMPERATURE_COLD = (
    "I'll have a fresh, hot replacement ready for you in just a moment{suffix}."
)
GOOD_GENERIC = (
    "I understand your concern{suffix}. "
    "Let's work on getting this resolved for you right away."
)

GOOD_TEMPLATES: dict[IssueTag, str] = {
    IssueTag.ORDER_DELAY: (
        "Let me look into your order right away{suffix} "
        "and see what's causing the delay."
    ),
    IssueTag.WRONG_ORDER: (
        "I'll get that corrected for you immediately{suffix}. "
        "We'll make sure you get exactly what you ordered."
    ),
    IssueTag.TEMPERATURE: "Let me get that at the perfect temperature for you{suffix}.",
    IssueTag.MILK_TYPE: (
        "I'll get that remade with the correct milk type right away{suffix}. "
        "We want to make sure it's exactly how you like it."
    ),
    IssueTag.STAFF_ATTITUDE: (
        "I sincerely apologize for that experience{suffix}. That's not the level "
        "of service we strive for, and I'll address this with the team."
    ),
    IssueTag.PRICING: (
        "I understand your concern about the pricing{suffix}. Let me explain "
        "our value and see if there's anything I can do for you."
    ),
    IssueTag.CLEANLINESS: (
        "I'll have that area cleaned immediately{suffix}. "
        "Thank you for bringing this to our attention."
    ),
    IssueTag.SIZE: "I'll get that switched to the correct size for you right away{suffix}.",
    IssueTag.MISSING_ITEM: (
        "Let me grab that missing item for you immediately{suffix}. "
        "I'll make sure you have everything you ordered."
    ),
    IssueTag.CONNECTIVITY: (
        "I'll get you the correct network information{suffix} "
        "and make sure you're connected properly."
    ),
    IssueTag.NOISE: (
        "I can definitely adjust the volume for you{suffix}. "
        "We want everyone to be comfortable."
    ),
    IssueTag.SEATING: (
        "Let me find you a better spot{suffix}. "
        "I'll check what tables we have available."
    ),
    IssueTag.LOYALTY: (
        "I'll double-check your rewards account{suffix} "
        "and make sure all your points are properly credited."
    ),
    IssueTag.PAYMENT: (
        "Let me review that transaction for you{suffix} "
        "and get this billing issue sorted out."
    ),
    IssueTag.CONVERSATION_END: (
        "Perfect! I'm glad we could get everything sorted out for you{suffix}. "
        "Is there anything else I can help you with today?"
    ),
}

# --- Dismissive replies ---

BAD_MULTIPLE = (
    "There's a lot going on today. We'll get to all of it when we can."
)
BAD_HIGH_EMOTION = (
    "I understand you're upset, but these things happen in a busy place like this."
)
BAD_HIGH_URGENCY = (
    "We're doing our best, but we can only move so fast during peak hours."
)
BAD_ORDER_DELAY_LONG_WAIT = (
    "Orders do take time, especially when we're busy. It'll be ready when it's ready."
)
BAD_GENERIC = "That's just how things go sometimes."

BAD_TEMPLATES: dict[IssueTag, str] = {
    IssueTag.ORDER_DELAY: (
        "Mobile orders can take a while depending on the rush, "
        "yours should come up eventually."
    ),
    IssueTag.WRONG_ORDER: "If it's close enough to what you ordered, it might be fine as is.",
    IssueTag.TEMPERATURE: (
        "The temperature changes quickly once it's made, "
        "that's completely normal for coffee."
    ),
    IssueTag.MILK_TYPE: (
        "We usually use the standard milk unless you specifically mention otherwise."
    ),
    IssueTag.STAFF_ATTITUDE: (
        "I'm sure no one meant anything by it. Everyone's just trying to do their job."
    ),
    IssueTag.PRICING: (
        "Our prices are standard for this area and reflect the quality "
        "of ingredients we use."
    ),
    IssueTag.CLEANLINESS: (
        "It gets cleaned regularly, you might have just caught it "
        "before the next cleaning cycle."
    ),
    IssueTag.SIZE: (
        "That's the standard size we serve for that drink, it's consistent with our menu."
    ),
    IssueTag.MISSING_ITEM: (
        "Sometimes small things get missed during busy periods, "
        "but it shouldn't affect the overall experience."
    ),
    IssueTag.CONNECTIVITY: (
        "The Wi-Fi has its moments during peak hours. You might try reconnecting."
    ),
    IssueTag.NOISE: (
        "It's not unusually loud for this time of day, "
        "coffee shops tend to have ambient noise."
    ),
    IssueTag.SEATING: (
        "Seating just depends on who's here at the time. "
        "You're welcome to wait for something to open up."
    ),
    IssueTag.LOYALTY: (
        "If the points didn't go through this time, "
        "they'll probably add correctly next time."
    ),
    IssueTag.PAYMENT: (
        "Charges sometimes take a while to process properly, "
        "the system will sort itself out."
    ),
    IssueTag.CONVERSATION_END: "Alright then. Let me know if anything else comes up.",
}

# --- Single-pass keyword fallback ---
#
# (keywords, good, bad), checked in order against the lowercased raw text.

LEGACY_RESPONSES: list[tuple[tuple[str, ...], str, str]] = [
    (
        ("order", "mobile", "app"),
        "I'll take a quick look to see where your order is in the queue "
        "and make sure it's moving along.",
        "Mobile orders can take a while depending on the rush, "
        "yours should come up eventually.",
    ),
    (
        ("wait", "long", "time"),
        "I see the wait's been longer than expected. "
        "Let's try to get you taken care of soon.",
        "It's just a busy time right now; we can't speed it up much.",
    ),
    (
        ("wrong", "mistake", "name"),
        "Let me double-check and fix that so you get exactly what you ordered.",
        "If it's close enough, it might be fine as is.",
    ),
    (
        ("cold", "temperature", "hot"),
        "I can have that remade so it's at the right temperature for you.",
        "It cools down fast once it's poured, that's normal.",
    ),
    (
        ("milk", "dairy", "soy", "almond", "oat"),
        "I'll get that adjusted to your preferred milk type.",
        "We usually use the standard unless otherwise specified.",
    ),
    (
        ("rude", "staff"),
        "I'm sorry to hear that. I'll mention it to the team so we can improve.",
        "I'm sure no one meant anything by it.",
    ),
    (
        ("price", "cost", "expensive"),
        "I understand your concern. We use premium ingredients, "
        "but I'll note your feedback.",
        "Our prices are standard for this area.",
    ),
    (
        ("dirty", "clean", "mess"),
        "I'll have someone check that area shortly.",
        "It gets cleaned regularly, maybe you just caught it before the next sweep.",
    ),
    (
        ("size", "small", "large"),
        "I can switch that out for the size you wanted.",
        "That's the size we have listed for that drink.",
    ),
    (
        ("missing", "forgot", "not included"),
        "Let me grab the missing item for you right now.",
        "Sometimes small things get left out, but it shouldn't affect much.",
    ),
    (
        ("wifi", "internet"),
        "I can confirm the network info for you if you'd like.",
        "The Wi-Fi has its moments; maybe try reconnecting.",
    ),
    (
        ("noise", "loud", "music"),
        "We can try lowering the volume a bit for you.",
        "It's not unusually loud for this time of day.",
    ),
    (
        ("seat", "table", "chair"),
        "I can check if there's a cleaner table available.",
        "Seating just depends on who's here at the time.",
    ),
    (
        ("reward", "points", "loyalty"),
        "I'll check your rewards and make sure they're added correctly.",
        "If it didn't go through, it'll probably add next time.",
    ),
    (
        ("pay", "card", "charge"),
        "I'll review the transaction so we can clear this up.",
        "Charges sometimes take a while to update, it'll sort itself out.",
    ),
]
