from salon_booking.domain.entities.service_catalog import Service
from salon_booking.domain.entities.stylist import AUTO_STYLIST_ID, Stylist

# Prices are "from" prices in EUR; the deposit is collected online, the rest in the salon.
SERVICES: tuple[Service, ...] = (
    Service(
        id="dreadlocs_retwist",
        name="Dreadlocs – Interlocking / Retwist + Styling",
        category="Locs & Dreads",
        tags=("locs",),
        price_from=55,
        duration_min=120,
        deposit=30,
        description="Retwist or interlocking including styling. Very thick or matted hair may cost extra.",
    ),
    Service(
        id="instant_locs",
        name="Crochet – Instant Locs",
        category="Locs & Dreads",
        tags=("locs",),
        price_from=100,
        duration_min=180,
        deposit=40,
        description="Instant locs with the crochet technique.",
    ),
    Service(
        id="starter_locs",
        name="Starter Locs (Unisex) + Barrel / Twist / Open",
        category="Locs & Dreads",
        tags=("locs", "twists"),
        price_from=65,
        duration_min=150,
        deposit=35,
        description="The start for permanent locs. Demanding hair conditions may cost extra.",
    ),
    Service(
        id="plain_twist_braids",
        name="Plain Twist & Braids",
        category="Twists",
        tags=("twists", "braids"),
        price_from=60,
        duration_min=120,
        deposit=30,
        description="Classic twists or braids, clean and elegant.",
    ),
    Service(
        id="comb_twist",
        name="Comb Twist",
        category="Twists",
        tags=("twists",),
        price_from=45,
        duration_min=90,
        deposit=25,
        description="A quick twist look for definition.",
    ),
    Service(
        id="cornrows",
        name="Cornrows / Twist'n'Cornrows",
        category="Braids",
        tags=("braids",),
        price_from=60,
        duration_min=120,
        deposit=30,
        description="Cornrows and combination styles, priced by number of rows.",
    ),
    Service(
        id="ponytail_europe",
        name="Europe Hair Braided Ponytail",
        category="Ponytails",
        tags=("ponytails", "braids"),
        price_from=65,
        duration_min=120,
        deposit=30,
        description="Braided ponytail with Europe hair.",
    ),
    Service(
        id="ponytail_afrohair",
        name="Afrohair Braided Ponytail",
        category="Ponytails",
        tags=("ponytails", "braids"),
        price_from=65,
        duration_min=120,
        deposit=30,
        description="Braided ponytail with Afro hair.",
    ),
    Service(
        id="half_down_half_up",
        name="Half down Half up",
        category="Ponytails",
        tags=("ponytails",),
        price_from=70,
        duration_min=150,
        deposit=35,
        description="Half up, half down. Elegant and editorial.",
    ),
    Service(
        id="braids_feed_in",
        name="Braids (Boho) / Feed-In Cornrows",
        category="Braids",
        tags=("braids",),
        price_from=90,
        duration_min=180,
        deposit=40,
        description="Boho braids or feed-in cornrows.",
    ),
    Service(
        id="passion_twist",
        name="Passion Twist",
        category="Twists",
        tags=("twists",),
        price_from=110,
        duration_min=180,
        deposit=40,
        description="Passion twists for a soft, voluminous look.",
    ),
)

STYLISTS: tuple[Stylist, ...] = (
    Stylist(id=AUTO_STYLIST_ID, name="Any stylist (automatic)", focus="Assigned by the salon", role="auto"),
    Stylist(id="dreads", name="Stylist A (Dreads/Locs)", focus="Dreads focus"),
    Stylist(id="stylist_b", name="Stylist B", focus="All-round"),
    Stylist(id="stylist_c", name="Stylist C", focus="All-round"),
    Stylist(id="stylist_d", name="Stylist D", focus="All-round"),
)
