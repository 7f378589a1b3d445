"""Segment colours, enumerated field values, and the random-name pool."""

# Segment fill colours, cycled by segment index (alpha suffix dropped for SVG)
SEGMENT_COLORS = [
    "#f54d4d",
    "#205cbd",
    "#45B7D1",
    "#54cb94",
    "#FECA57",
    "#c810c8",
    "#FF6B9D",
    "#bea412",
]

RESPIN_COLOR = "#ffd700"
BLANK_COLOR = "#e5e7eb"

# Accepted values for enumerated session / spin fields
INPUT_METHODS = ("custom", "random", "numbers")
ACKNOWLEDGE_METHODS = ("button", "backdrop", "x", "remove")

# Headline shown above a winner
WINNER_RHYMES = [
    "Winner Winner, Chicken Dinner",
    "The chosen one is...",
    "Victory Royale!",
    "Winner = Declared",
    "Absolute legend pick",
    "Throw some W's in the chat",
    "The Wheel has spoken",
    "Randomly selected winner is...",
    "Jackpot!!!",
    "Shout-Out",
    "The Algorithm was in favor of...",
]

# Pool for "random names" wheels, grouped by origin
NAME_POOL = {
    "english": [
        "Emma", "Liam", "Olivia", "Noah", "Ava", "Ethan", "Sophia", "Mason", "Isabella", "William",
        "Mia", "James", "Charlotte", "Benjamin", "Amelia", "Lucas", "Harper", "Henry", "Evelyn", "Alex",
        "Luna", "Jack", "Ella", "Daniel", "Chloe", "Matthew", "Grace", "Jackson", "Zoe", "David",
        "Lily", "Leo", "Aria", "Ryan", "Hazel", "Nathan", "Ellie", "Adam", "Sofia", "Owen",
    ],
    "spanish": [
        "Alejandro", "Diego", "Carlos", "Camila", "Jose", "Valentina", "Luis", "Valeria", "Miguel", "Natalia",
        "Juan", "Daniela", "Francisco", "Nicole", "Rafael", "Sara", "Antonio", "Regina", "Andrea", "Eduardo",
        "Paola", "Fernando", "Ricardo", "Maria", "Sergio", "Fernanda", "Roberto", "Gabriela", "Javier", "Pablo",
    ],
    "french": [
        "Pierre", "Marie", "Jean", "Anne", "Michel", "Francoise", "Philippe", "Monique", "Alain", "Catherine",
        "Nicolas", "Sylvie", "Patrick", "Christine", "Isabelle", "Bernard", "Martine", "Laurent", "Brigitte", "Claude",
    ],
    "german": [
        "Lukas", "Leonie", "Jonas", "Hannah", "Felix", "Lena", "Maximilian", "Anna", "Paul", "Lea",
        "Finn", "Marie", "Elias", "Johanna", "Moritz", "Greta", "Tobias", "Frieda", "Jannik", "Klara",
    ],
    "other": [
        "Aiko", "Hiro", "Yuki", "Sakura", "Arjun", "Priya", "Ravi", "Ananya", "Wei", "Mei",
        "Jin", "Hana", "Omar", "Layla", "Amir", "Zara", "Kofi", "Amara", "Tariq", "Nia",
    ],
}
