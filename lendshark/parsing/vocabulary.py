"""
Keyword lists for the transaction parser.

DESIGN DECISION: Order matters. Each scan walks its list front to back
and the first hit wins, so reordering a tuple changes how ambiguous
sentences are read. Everything here is immutable.
"""

SETTLE_KEYWORDS = (
    "settle", "settled",
    "paid", "pay",
    "repaid", "repay",
    "clear", "cleared",
    "square", "squared",
)

LEND_KEYWORDS = (
    "lent", "lended", "loaned", "gave",
    "paid for",
    "spotted", "covered", "fronted",
)

BORROW_KEYWORDS = (
    "borrowed", "owe", "owes", "got", "received", "took",
)

# Words that turn a sentence without an amount into an item loan
ITEM_INDICATORS = ("my", "the", "a", "an", "their", "his", "her")

LEND_PREPOSITIONS = ("to", "for")
BORROW_PREPOSITIONS = ("from", "off")

# Never a party name in "X owes me" / "X paid 20"
SUBJECT_PRONOUNS = frozenset({"i", "we", "you", "he", "she", "they", "it", "who", "someone", "everyone"})

PARTIAL_PAYMENT_NOTE = "Partial payment"

NOTE_MARKERS = ("note:", "memo:", "notes:", "//")

CURRENCY_SYMBOLS = "$€£¥₹"

# A name or item phrase ends at the first of these
STOP_WORDS = frozenset(
    {
        "to", "for", "from", "off", "with", "at", "in", "on", "by",
        "due", "tomorrow", "next", "note", "notes", "memo",
        "me", "and", "dollars", "dollar", "bucks", "buck",
        "interest", "weekly", "per", "week",
    }
    | set(SETTLE_KEYWORDS)
    | {word for phrase in LEND_KEYWORDS for word in phrase.split()}
    | set(BORROW_KEYWORDS)
    | set(ITEM_INDICATORS)
)
