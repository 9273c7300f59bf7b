# src/classification/patterns.py — v1
"""Genre association tables for Telugu cinema.

Actor and director associations, era defaults, mood and audience-fit
mappings, canonical genre priority and alias normalization. The first
genre of each list is the one used as a vote.
"""

from __future__ import annotations

ACTOR_GENRE_MAP: dict[str, list[str]] = {
    # Golden era
    "N.T. Rama Rao": ["Drama", "Mythological", "Action"],
    "Akkineni Nageswara Rao": ["Drama", "Romance", "Family"],
    "Sobhan Babu": ["Romance", "Drama", "Family"],
    "Superstar Krishna": ["Action", "Cowboy", "Drama"],
    "Krishnam Raju": ["Action", "Drama", "Historical"],
    "S. V. Ranga Rao": ["Drama", "Mythological", "Historical"],
    "Relangi": ["Comedy", "Drama", "Family"],
    "Savitri": ["Drama", "Romance", "Family"],
    "Sridevi": ["Drama", "Romance", "Fantasy"],
    # 1980s-2000s
    "Chiranjeevi": ["Action", "Drama", "Comedy"],
    "Nagarjuna": ["Action", "Romance", "Drama"],
    "Venkatesh": ["Drama", "Comedy", "Family"],
    "Balakrishna": ["Action", "Drama", "Mythological"],
    "Rajendra Prasad": ["Comedy", "Family", "Drama"],
    "Mohan Babu": ["Action", "Drama", "Comedy"],
    "Jagapathi Babu": ["Family", "Drama", "Action"],
    "Srikanth": ["Family", "Drama", "Romance"],
    # Current generation
    "Mahesh Babu": ["Action", "Drama", "Thriller"],
    "Pawan Kalyan": ["Action", "Comedy", "Romance"],
    "Jr. NTR": ["Action", "Drama", "Mass"],
    "Allu Arjun": ["Action", "Romance", "Comedy"],
    "Ram Charan": ["Action", "Drama", "Romance"],
    "Prabhas": ["Action", "Fantasy", "Romance"],
    "Ravi Teja": ["Action", "Comedy", "Mass"],
    "Nani": ["Drama", "Romance", "Comedy"],
    "Vijay Deverakonda": ["Romance", "Drama", "Action"],
    "Sharwanand": ["Drama", "Romance", "Family"],
    "Naga Chaitanya": ["Romance", "Drama", "Action"],
    "Adivi Sesh": ["Thriller", "Action", "Mystery"],
}

DIRECTOR_GENRE_MAP: dict[str, list[str]] = {
    "K. Raghavendra Rao": ["Drama", "Romance", "Family"],
    "K. Vishwanath": ["Drama", "Musical", "Art"],
    "Bapu": ["Drama", "Mythological", "Comedy"],
    "Singeetam Srinivasa Rao": ["Fantasy", "Comedy", "Musical"],
    "Dasari Narayana Rao": ["Drama", "Social", "Family"],
    "B. Vittalacharya": ["Mythological", "Fantasy", "Drama"],
    "Jandhyala": ["Comedy", "Drama", "Family"],
    "A. Kodandarami Reddy": ["Action", "Drama", "Commercial"],
    "S.S. Rajamouli": ["Action", "Fantasy", "Historical"],
    "Sukumar": ["Action", "Drama", "Thriller"],
    "Trivikram Srinivas": ["Comedy", "Family", "Action"],
    "Puri Jagannadh": ["Action", "Mass", "Romance"],
    "Boyapati Srinu": ["Action", "Mass", "Drama"],
    "Koratala Siva": ["Action", "Drama", "Social"],
    "Sekhar Kammula": ["Romance", "Drama", "Family"],
    "Ram Gopal Varma": ["Crime", "Thriller", "Horror"],
    "Krish Jagarlamudi": ["Drama", "Historical", "Social"],
    "Vamsi Paidipally": ["Family", "Drama", "Action"],
    "Anil Ravipudi": ["Comedy", "Action", "Family"],
    "Nag Ashwin": ["Sci-Fi", "Biography", "Drama"],
}

ERA_DEFAULTS: dict[str, list[str]] = {
    "1930s": ["Drama", "Mythological"],
    "1940s": ["Drama", "Mythological", "Social"],
    "1950s": ["Drama", "Mythological", "Romance"],
    "1960s": ["Drama", "Romance", "Family"],
    "1970s": ["Drama", "Action", "Romance"],
    "1980s": ["Action", "Drama", "Comedy"],
    "1990s": ["Action", "Romance", "Drama"],
    "2000s": ["Action", "Romance", "Comedy"],
    "2010s": ["Action", "Drama", "Commercial"],
    "2020s": ["Action", "Drama", "Thriller"],
}

MOOD_GENRE_MAP: dict[str, list[str]] = {
    "feel-good": ["Comedy", "Family", "Romance"],
    "light-hearted": ["Comedy", "Family"],
    "heartwarming": ["Drama", "Family", "Romance"],
    "uplifting": ["Drama", "Sports", "Biography"],
    "fun": ["Comedy", "Action"],
    "entertaining": ["Commercial", "Action", "Comedy"],
    "wholesome": ["Family", "Drama"],
    "dark-intense": ["Thriller", "Horror", "Crime"],
    "dark": ["Horror", "Thriller", "Crime"],
    "intense": ["Action", "Thriller", "Drama"],
    "edge-of-seat": ["Action", "Thriller"],
    "gripping": ["Thriller", "Crime", "Mystery"],
    "suspenseful": ["Thriller", "Mystery", "Crime"],
    "emotional": ["Drama", "Romance", "Family"],
    "tearjerker": ["Drama", "Romance"],
    "bittersweet": ["Drama", "Romance"],
    "thought-provoking": ["Drama", "Social"],
    "mind-bending": ["Thriller", "Sci-Fi", "Mystery"],
    "romantic": ["Romance", "Drama"],
    "action-packed": ["Action", "Thriller"],
    "thrilling": ["Action", "Thriller", "Adventure"],
    "adventurous": ["Adventure", "Action", "Fantasy"],
    "patriotic": ["War", "Historical", "Drama"],
    "nostalgic": ["Drama", "Family"],
    "inspirational": ["Drama", "Biography", "Sports"],
    "scary": ["Horror", "Thriller"],
    "satirical": ["Comedy", "Drama", "Social"],
    "mass-masala": ["Commercial", "Action", "Mass"],
    "family-entertainer": ["Family", "Comedy", "Drama"],
}

AUDIENCE_FIT_GENRE_MAP: dict[str, list[str]] = {
    "kids_friendly": ["Animation", "Family", "Comedy"],
    "family_watch": ["Family", "Drama", "Comedy"],
    "adult_themes": ["Drama", "Thriller", "Crime"],
    "date_movie": ["Romance", "Comedy", "Drama"],
    "group_watch": ["Action", "Comedy", "Thriller"],
    "solo_watch": ["Drama", "Thriller", "Art"],
    "discussion_worthy": ["Drama", "Social", "Biography"],
    "comfort_watch": ["Comedy", "Family", "Romance"],
    "youth_appeal": ["Romance", "Comedy", "Action"],
    "mass_appeal": ["Action", "Commercial", "Mass"],
    "class_appeal": ["Drama", "Art", "Romance"],
}

# Tie-break order: earlier wins.
PRIMARY_GENRE_PRIORITY: list[str] = [
    "Action", "Drama", "Romance", "Comedy", "Thriller", "Horror", "Family",
    "Historical", "Fantasy", "Sci-Fi", "Mythological", "Crime", "Mystery",
    "War", "Biography", "Sports", "Musical", "Documentary", "Animation",
    "Art", "Social", "Commercial", "Mass",
]

GENRE_ALIASES: dict[str, str] = {
    "action": "Action",
    "adventure": "Action",
    "drama": "Drama",
    "romance": "Romance",
    "romantic": "Romance",
    "comedy": "Comedy",
    "thriller": "Thriller",
    "suspense": "Thriller",
    "psychological": "Thriller",
    "horror": "Horror",
    "family": "Family",
    "historical": "Historical",
    "history": "Historical",
    "period": "Historical",
    "fantasy": "Fantasy",
    "sci-fi": "Sci-Fi",
    "scifi": "Sci-Fi",
    "science fiction": "Sci-Fi",
    "mythological": "Mythological",
    "mythology": "Mythological",
    "crime": "Crime",
    "mystery": "Mystery",
    "war": "War",
    "biography": "Biography",
    "biographical": "Biography",
    "biopic": "Biography",
    "sports": "Sports",
    "sport": "Sports",
    "musical": "Musical",
    "music": "Musical",
    "documentary": "Documentary",
    "animation": "Animation",
    "animated": "Animation",
    "art": "Art",
    "art house": "Art",
    "social": "Social",
    "commercial": "Commercial",
    "mass": "Mass",
    "masala": "Mass",
}

# Ordered: first keyword group found in the text wins.
SYNOPSIS_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("murder", "investigation", "detective", "crime scene", "criminal"), "Crime"),
    (("ghost", "haunted", "supernatural", "spirit", "demon"), "Horror"),
    (("love story", "romance", "heart", "falls in love", "romantic"), "Romance"),
    (("comedy", "hilarious", "funny", "laugh", "humor"), "Comedy"),
    (("war", "battle", "army", "soldier", "military"), "War"),
    (("historical", "ancient", "kingdom", "emperor", "dynasty"), "Historical"),
    (("action", "fight", "revenge", "vigilante"), "Action"),
    (("thriller", "suspense", "mystery", "twist"), "Thriller"),
    (("family", "parents", "siblings", "wedding", "tradition"), "Family"),
    (("sports", "cricket", "kabaddi", "boxing", "athlete"), "Sports"),
    (("biography", "life story", "real life", "true story"), "Biography"),
]


def normalize_genre(genre: str) -> str:
    """Canonical form of a genre name; unknown names pass through unchanged."""
    return GENRE_ALIASES.get(genre.lower().strip(), genre)


def _fuzzy_lookup(name: str, table: dict[str, list[str]]) -> list[str] | None:
    if not name:
        return None
    lowered = name.lower()
    for known, genres in table.items():
        known_lower = known.lower()
        if known_lower in lowered or lowered in known_lower:
            return genres
    return None


def find_actor_genres(actor: str) -> list[str] | None:
    """Genres associated with an actor (substring match either way)."""
    return _fuzzy_lookup(actor, ACTOR_GENRE_MAP)


def find_director_genres(director: str) -> list[str] | None:
    """Genres associated with a director (substring match either way)."""
    return _fuzzy_lookup(director, DIRECTOR_GENRE_MAP)


def era_genres(year: int | None) -> list[str]:
    """Default genres for the decade of ``year``; Drama when unknown."""
    if not year:
        return ["Drama"]
    return ERA_DEFAULTS.get(f"{year // 10 * 10}s", ["Drama"])


def keyword_genre(text: str) -> str | None:
    lowered = text.lower()
    for keywords, genre in SYNOPSIS_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return genre
    return None
