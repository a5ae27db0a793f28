#!/usr/bin/env python3
"""
Seed FlickPick with a small demo movie catalog for local development.
Movies whose title already exists are skipped, so the script can be re-run.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from flickpick.database import SessionLocal, init_db
from flickpick.models.movies import Movie

NOLAN_BIO = "British-American filmmaker known for non-linear storytelling."
DRAMA = ("Drama", "Serious, plot-driven stories portraying realistic characters.")
SCIFI = ("Science Fiction", "Speculative fiction built on imagined science and technology.")
CRIME = ("Crime", "Stories centred on criminal acts and their investigation.")

CATALOG = [
    {
        "title": "Inception",
        "description": "A thief who steals corporate secrets through dream-sharing technology "
        "is given the task of planting an idea into the mind of a CEO.",
        "genre": SCIFI,
        "director": ("Christopher Nolan", NOLAN_BIO),
        "actors": ["Leonardo DiCaprio", "Joseph Gordon-Levitt", "Elliot Page"],
        "image_path": "inception.png",
        "featured": True,
    },
    {
        "title": "Interstellar",
        "description": "A team of explorers travel through a wormhole in space "
        "in an attempt to ensure humanity's survival.",
        "genre": SCIFI,
        "director": ("Christopher Nolan", NOLAN_BIO),
        "actors": ["Matthew McConaughey", "Anne Hathaway", "Jessica Chastain"],
        "image_path": "interstellar.png",
        "featured": True,
    },
    {
        "title": "The Shawshank Redemption",
        "description": "Two imprisoned men bond over a number of years, finding solace "
        "and eventual redemption through acts of common decency.",
        "genre": DRAMA,
        "director": ("Frank Darabont", "French-born American director and screenwriter."),
        "actors": ["Tim Robbins", "Morgan Freeman"],
        "image_path": "shawshank.png",
        "featured": False,
    },
    {
        "title": "Pulp Fiction",
        "description": "The lives of two mob hitmen, a boxer, a gangster and his wife "
        "intertwine in four tales of violence and redemption.",
        "genre": CRIME,
        "director": ("Quentin Tarantino", "American filmmaker and screenwriter."),
        "actors": ["John Travolta", "Uma Thurman", "Samuel L. Jackson"],
        "image_path": "pulpfiction.png",
        "featured": False,
    },
]


def main():
    print("Seeding demo movies...")
    init_db()

    session = SessionLocal()
    try:
        existing = {title for (title,) in session.query(Movie.title).all()}
        created = 0
        for entry in CATALOG:
            if entry["title"] in existing:
                continue
            genre_name, genre_description = entry["genre"]
            director_name, director_bio = entry["director"]
            session.add(
                Movie(
                    title=entry["title"],
                    description=entry["description"],
                    genre_name=genre_name,
                    genre_description=genre_description,
                    director_name=director_name,
                    director_bio=director_bio,
                    actors=entry["actors"],
                    image_path=entry["image_path"],
                    featured=entry["featured"],
                )
            )
            created += 1

        session.commit()
        print(f"Created {created} movies ({len(CATALOG) - created} already present).")
        print("\nSeed complete!")
    finally:
        session.close()


if __name__ == "__main__":
    main()
