"""
Global Vocabulary Import
========================

Loads shared (global) themes, levels and words from a JSON file.

The file holds a list of records::

    [{"theme": "Aliya", "level": "Niveau 1", "hebrew": "שָׁלוֹם",
      "transliteration": "shalom", "french": "bonjour", "active": 1}, ...]

Levels are created in the order they first appear for each theme.

Usage:
    python scripts/import_words.py words.json [--reset-theme]

Options:
    --reset-theme   Delete the existing words and levels of each imported theme first
"""

import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hebrewduo_app import create_app
from hebrewduo_app.extensions import db
from hebrewduo_app.models import Favorite, Level, Progress, Theme, Word, WordOverride
from hebrewduo_app.modules.shared.utils import safe_commit


def load_records(path):
    with open(path, encoding='utf-8') as handle:
        records = json.load(handle)
    if not isinstance(records, list):
        raise ValueError("Le fichier doit contenir une liste d'entrées.")
    return records


def get_or_create_theme(name):
    theme = Theme.query.filter_by(name=name, user_id=None).first()
    if theme is None:
        theme = Theme(name=name, user_id=None, active=True)
        db.session.add(theme)
        db.session.flush()
        print(f"  + Thème créé : {name}")
    return theme


def reset_theme(theme):
    """Remove the words and levels of a global theme before re-importing it."""
    words = Word.query.filter_by(theme_id=theme.theme_id).all()
    word_ids = [word.word_id for word in words]
    if word_ids:
        for model in (Progress, Favorite, WordOverride):
            model.query.filter(model.word_id.in_(word_ids)).delete(synchronize_session=False)
    for word in words:
        word.level_id = None
        db.session.delete(word)
    for level in list(theme.levels):
        db.session.delete(level)
    db.session.flush()
    print(f"  - {len(words)} mots supprimés du thème {theme.name}")


def import_records(records, reset=False):
    themes = {}
    levels = {}
    created = 0
    skipped = 0

    for index, record in enumerate(records, start=1):
        theme_name = (record.get('theme') or '').strip()
        hebrew = (record.get('hebrew') or '').strip()
        french = (record.get('french') or '').strip()
        if not theme_name or not hebrew or not french:
            print(f"  ! Entrée {index} ignorée : thème, hébreu et français sont requis")
            skipped += 1
            continue

        theme = themes.get(theme_name)
        if theme is None:
            theme = get_or_create_theme(theme_name)
            if reset:
                reset_theme(theme)
            themes[theme_name] = theme

        level = None
        level_name = (record.get('level') or '').strip()
        if level_name:
            key = (theme.theme_id, level_name)
            level = levels.get(key)
            if level is None:
                level = Level.query.filter_by(theme_id=theme.theme_id, name=level_name).first()
            if level is None:
                order = Level.query.filter_by(theme_id=theme.theme_id).count() + 1
                level = Level(theme_id=theme.theme_id, name=level_name, level_order=order, active=True)
                db.session.add(level)
                db.session.flush()
            levels[key] = level

        db.session.add(Word(
            hebrew=hebrew,
            transliteration=(record.get('transliteration') or '').strip() or None,
            french=french,
            theme_id=theme.theme_id,
            level_id=level.level_id if level else None,
            active=bool(record.get('active', 1)),
            user_id=None,
        ))
        created += 1

    safe_commit(db.session)
    return created, skipped


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Import global vocabulary from a JSON file')
    parser.add_argument('file', help='JSON file with theme/level/hebrew/transliteration/french records')
    parser.add_argument('--reset-theme', action='store_true', help='Replace the words and levels of each theme')
    args = parser.parse_args()

    app = create_app()

    with app.app_context():
        print(f"Import de {args.file}...")
        records = load_records(args.file)
        created, skipped = import_records(records, reset=args.reset_theme)
        print(f"✅ {created} mots importés, {skipped} ignorés.")
