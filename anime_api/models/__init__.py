from anime_api.models.anime import Anime, AnimeRecord

__all__ = [
    "Anime",
    "AnimeRecord",
]
