"""
Classic Stocks - The sixteen stock cards, four per sector.

Each sector has one card per archetype band:
- base 8: expensive, high dividend (or high growth for tech)
- base 6 and 4: balanced or growth
- base 2: cheap, high growth or high dividend
"""

from ...catalog.definitions import StockDefinition


def _stock(name, base_cost, dividend, growth, sector, archetype, description):
    return StockDefinition(
        name=name,
        base_cost=base_cost,
        dividend=dividend,
        growth=growth,
        sector=sector,
        description=description,
        archetype=archetype,
    )


CLASSIC_STOCKS: list[StockDefinition] = [
    # Tech
    _stock("TechTitan", 8, 1, 5, "tech", "High Growth Tech",
           "Parody of mega cloud computing giants, dominating data storage with endless server farms."),
    _stock("GadgetGuru", 6, 2, 5, "tech", "Growth Gadget Maker",
           "Spoof on smartphone innovators, churning out shiny devices that break after one drop."),
    _stock("ByteBusters", 4, 3, 4, "tech", "Balanced Software",
           "Satire of antivirus firms, promising unbreakable firewalls that leak like sieves."),
    _stock("SockStream", 2, 4, 2, "tech", "High Dividend Media",
           "Mockery of video streamers, buffering eternally while hoarding your subscription cash."),
    # Finance
    _stock("MoneyMogul Bank", 8, 4, 2, "finance", "High Dividend Lender",
           "Parody of old-school investment banks, paying fat yields from dusty vaults."),
    _stock("WallSt Wizards", 6, 3, 3, "finance", "Balanced Broker",
           "Take on trading platforms, shuffling fees while pretending to democratize wealth."),
    _stock("FinFiasco Insure", 4, 2, 4, "finance", "Growth Fintech",
           "Spoof of fintech disruptors, growing fast on risky loans to impulse buyers."),
    _stock("CashCouch Fund", 2, 1, 5, "finance", "High Growth Speculator",
           "Satire of high-risk hedge funds, volatile bets on meme coins and hype."),
    # Industrial
    _stock("SteelStamp Corp", 8, 4, 2, "industrial", "High Dividend Industrial",
           "Parody of legacy auto makers, cranking dividends from rusty assembly lines."),
    _stock("WidgetWorks Ltd", 6, 3, 3, "industrial", "Balanced Manufacturer",
           "Mock heavy machinery giants, steady output of gears and widgets forever."),
    _stock("RoboForge Inc", 4, 2, 4, "industrial", "Growth Automator",
           "Spoof on automation firms, expanding factories with glitchy AI robots."),
    _stock("NutNut Bolts", 2, 1, 5, "industrial", "High Growth Innovator",
           "Take on speculative drone makers, soaring high on vaporware promises."),
    # Health and science
    _stock("PillPush Pharma", 8, 4, 2, "health and science", "High Dividend Pharma",
           "Parody of big drug makers, milking patents for reliable pill profits."),
    _stock("GeneGamble Bio", 6, 2, 5, "health and science", "High Growth Biotech",
           "Satire of biotech dreamers, betting on miracle cures that mostly flop."),
    _stock("HealHack Labs", 4, 3, 4, "health and science", "Balanced Medtech",
           "Spoof on medtech wearables, tracking your steps to nowhere useful."),
    _stock("SerumStable Co", 2, 1, 3, "health and science", "Steady Science",
           "Mock vaccine rushers, steady science with occasional booster hype."),
]
