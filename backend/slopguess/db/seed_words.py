"""Word bank seed data - category-tagged, image-friendly words.

Invariants:
    - seed_word_bank is idempotent: existing words are skipped, never updated
    - Words are unique across categories
"""

import logging

from sqlalchemy import select

from slopguess.core.repository_protocols import SessionFactory
from slopguess.models.word_bank import WordBankEntry

logger = logging.getLogger(__name__)

SEED_WORDS: tuple[tuple[str, str], ...] = (
    ("octopus", "animals"),
    ("dragon", "animals"),
    ("flamingo", "animals"),
    ("chameleon", "animals"),
    ("penguin", "animals"),
    ("wolf", "animals"),
    ("jellyfish", "animals"),
    ("phoenix", "animals"),
    ("sloth", "animals"),
    ("narwhal", "animals"),
    ("tarantula", "animals"),
    ("peacock", "animals"),
    ("unicorn", "mythical creatures"),
    ("kraken", "mythical creatures"),
    ("griffin", "mythical creatures"),
    ("minotaur", "mythical creatures"),
    ("chimera", "mythical creatures"),
    ("centaur", "mythical creatures"),
    ("hydra", "mythical creatures"),
    ("sphinx", "mythical creatures"),
    ("basilisk", "mythical creatures"),
    ("yeti", "mythical creatures"),
    ("pegasus", "mythical creatures"),
    ("mermaid", "mythical creatures"),
    ("lighthouse", "objects"),
    ("violin", "objects"),
    ("telescope", "objects"),
    ("hourglass", "objects"),
    ("chandelier", "objects"),
    ("typewriter", "objects"),
    ("compass", "objects"),
    ("gramophone", "objects"),
    ("submarine", "objects"),
    ("balloon", "objects"),
    ("umbrella", "objects"),
    ("lantern", "objects"),
    ("dancing", "actions"),
    ("flying", "actions"),
    ("melting", "actions"),
    ("exploding", "actions"),
    ("juggling", "actions"),
    ("surfing", "actions"),
    ("levitating", "actions"),
    ("wrestling", "actions"),
    ("skateboarding", "actions"),
    ("sleepwalking", "actions"),
    ("crumbling", "actions"),
    ("erupting", "actions"),
    ("tiny", "adjectives"),
    ("ancient", "adjectives"),
    ("crystalline", "adjectives"),
    ("floating", "adjectives"),
    ("gigantic", "adjectives"),
    ("melancholic", "adjectives"),
    ("invisible", "adjectives"),
    ("radioactive", "adjectives"),
    ("furious", "adjectives"),
    ("translucent", "adjectives"),
    ("bewildered", "adjectives"),
    ("prehistoric", "adjectives"),
    ("underwater", "settings"),
    ("space", "settings"),
    ("forest", "settings"),
    ("volcano", "settings"),
    ("cityscape", "settings"),
    ("desert", "settings"),
    ("arctic tundra", "settings"),
    ("dungeon", "settings"),
    ("rooftop", "settings"),
    ("library", "settings"),
    ("train station", "settings"),
    ("graveyard", "settings"),
    ("spaghetti", "foods"),
    ("pizza", "foods"),
    ("sushi", "foods"),
    ("taco", "foods"),
    ("waffle", "foods"),
    ("donut", "foods"),
    ("burrito", "foods"),
    ("croissant", "foods"),
    ("pineapple", "foods"),
    ("watermelon", "foods"),
    ("pretzel", "foods"),
    ("cupcake", "foods"),
    ("euphoric", "emotions"),
    ("terrified", "emotions"),
    ("contemplative", "emotions"),
    ("ecstatic", "emotions"),
    ("nostalgic", "emotions"),
    ("confused", "emotions"),
    ("triumphant", "emotions"),
    ("dramatic", "emotions"),
    ("suspicious", "emotions"),
    ("panic-stricken", "emotions"),
    ("awestruck", "emotions"),
    ("mischievous", "emotions"),
    ("thunderstorm", "weather"),
    ("tornado", "weather"),
    ("blizzard", "weather"),
    ("rainbow", "weather"),
    ("aurora borealis", "weather"),
    ("monsoon", "weather"),
    ("hailstorm", "weather"),
    ("solar eclipse", "weather"),
    ("fog", "weather"),
    ("sandstorm", "weather"),
    ("lightning", "weather"),
    ("avalanche", "weather"),
    ("crimson", "colors"),
    ("azure", "colors"),
    ("emerald", "colors"),
    ("golden", "colors"),
    ("neon pink", "colors"),
    ("obsidian", "colors"),
    ("turquoise", "colors"),
    ("magenta", "colors"),
    ("lavender", "colors"),
    ("amber", "colors"),
    ("cobalt", "colors"),
    ("scarlet", "colors"),
    ("astronaut", "professions"),
    ("pirate", "professions"),
    ("wizard", "professions"),
    ("samurai", "professions"),
    ("gladiator", "professions"),
    ("chef", "professions"),
    ("detective", "professions"),
    ("cowboy", "professions"),
    ("ninja", "professions"),
    ("blacksmith", "professions"),
    ("archaeologist", "professions"),
    ("mad scientist", "professions"),
    ("hot air balloon", "vehicles"),
    ("rocket ship", "vehicles"),
    ("flying carpet", "vehicles"),
    ("steam locomotive", "vehicles"),
    ("unicycle", "vehicles"),
    ("zeppelin", "vehicles"),
    ("chariot", "vehicles"),
    ("kayak", "vehicles"),
    ("hovercraft", "vehicles"),
    ("penny-farthing", "vehicles"),
    ("monster truck", "vehicles"),
    ("gondola", "vehicles"),
    ("tentacles", "body parts"),
    ("antlers", "body parts"),
    ("wings", "body parts"),
    ("claws", "body parts"),
    ("tusks", "body parts"),
    ("tail", "body parts"),
    ("horns", "body parts"),
    ("eyeball", "body parts"),
    ("mustache", "body parts"),
    ("fangs", "body parts"),
    ("scales", "body parts"),
    ("feathers", "body parts"),
    ("diamond", "materials"),
    ("lava", "materials"),
    ("crystal", "materials"),
    ("jelly", "materials"),
    ("marble", "materials"),
    ("bubblegum", "materials"),
    ("obsidian glass", "materials"),
    ("driftwood", "materials"),
    ("stained glass", "materials"),
    ("origami paper", "materials"),
    ("neon tubes", "materials"),
    ("coral", "materials"),
    ("time travel", "abstract concepts"),
    ("gravity", "abstract concepts"),
    ("dreams", "abstract concepts"),
    ("chaos", "abstract concepts"),
    ("infinity", "abstract concepts"),
    ("parallel universe", "abstract concepts"),
    ("deja vu", "abstract concepts"),
    ("illusion", "abstract concepts"),
    ("evolution", "abstract concepts"),
    ("paradox", "abstract concepts"),
    ("metamorphosis", "abstract concepts"),
    ("entropy", "abstract concepts"),
    ("watercolor", "styles"),
    ("pixel art", "styles"),
    ("oil painting", "styles"),
    ("neon", "styles"),
    ("vaporwave", "styles"),
    ("art deco", "styles"),
    ("gothic", "styles"),
    ("baroque", "styles"),
    ("pop art", "styles"),
    ("ukiyo-e", "styles"),
    ("psychedelic", "styles"),
    ("brutalist", "styles"),
    ("medieval", "time periods"),
    ("Neolithic", "time periods"),
    ("futuristic", "time periods"),
    ("Victorian", "time periods"),
    ("1980s", "time periods"),
    ("ancient Egyptian", "time periods"),
    ("Wild West", "time periods"),
    ("Stone Age", "time periods"),
    ("cyberpunk", "time periods"),
    ("Jurassic", "time periods"),
    ("Renaissance era", "time periods"),
    ("post-apocalyptic", "time periods"),
    ("bagpipes", "musical instruments"),
    ("banjo", "musical instruments"),
    ("theremin", "musical instruments"),
    ("didgeridoo", "musical instruments"),
    ("xylophone", "musical instruments"),
    ("tuba", "musical instruments"),
    ("electric guitar", "musical instruments"),
    ("harp", "musical instruments"),
    ("drums", "musical instruments"),
    ("pipe organ", "musical instruments"),
    ("saxophone", "musical instruments"),
    ("tambourine", "musical instruments"),
    ("mushroom", "nature"),
    ("cactus", "nature"),
    ("bonsai tree", "nature"),
    ("venus flytrap", "nature"),
    ("kelp forest", "nature"),
    ("redwood tree", "nature"),
    ("sunflower", "nature"),
    ("stalagmite", "nature"),
    ("geyser", "nature"),
    ("waterfall", "nature"),
    ("glacier", "nature"),
    ("tumbleweed", "nature"),
)


async def seed_word_bank(session_factory: SessionFactory) -> int:
    """Insert missing seed words. Returns the number inserted."""
    async with session_factory() as db:
        existing = set((await db.execute(select(WordBankEntry.word))).scalars().all())
        missing = [
            WordBankEntry(word=word, category=category)
            for word, category in SEED_WORDS
            if word not in existing
        ]
        if missing:
            db.add_all(missing)
            await db.commit()

    logger.info(f"Word bank seeded: {len(missing)} new, {len(existing)} existing")
    return len(missing)
