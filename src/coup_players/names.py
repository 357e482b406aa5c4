"""Display names for bot players."""
import random
from typing import Optional

BOT_NAMES = [
    "Abigail", "Adrian", "Alma", "Amos", "Ana", "Arlo", "Beatrice", "Bernard",
    "Bianca", "Boris", "Camille", "Carlos", "Celia", "Clement", "Dalia", "Darius",
    "Delphine", "Dmitri", "Edith", "Elias", "Elena", "Emil", "Esther", "Felix",
    "Fiona", "Gideon", "Greta", "Hana", "Hector", "Ida", "Igor", "Imogen",
    "Ivan", "Jasper", "Josephine", "Jonas", "Kira", "Lars", "Leona", "Lucia",
    "Magnus", "Margot", "Matteo", "Mila", "Nadia", "Nils", "Octavia", "Oscar",
    "Petra", "Quentin", "Rosa", "Rufus", "Selma", "Silas", "Tamsin", "Tobias",
    "Ursula", "Victor", "Wanda", "Yusuf", "Zelda", "Zoran",
]


def random_name(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(BOT_NAMES)
