"""Known Emoji shortcodes and emoticon aliases."""

from __future__ import annotations

EMOJIS = frozenset(
    {
        ":grinning_face:",
        ":grinning_face_with_big_eyes:",
        ":grinning_face_with_smiling_eyes:",
        ":beaming_face_with_smiling_eyes:",
        ":grinning_squinting_face:",
        ":grinning_face_with_sweat:",
        ":rolling_on_the_floor_laughing:",
        ":face_with_tears_of_joy:",
        ":slightly_smiling_face:",
        ":upside_down_face:",
        ":winking_face:",
        ":smiling_face_with_smiling_eyes:",
        ":smiling_face_with_halo:",
        ":smiling_face_with_hearts:",
        ":smiling_face_with_heart_eyes:",
        ":star_struck:",
        ":face_blowing_a_kiss:",
        ":kissing_face:",
        ":smiling_face:",
        ":kissing_face_with_smiling_eyes:",
        ":smiling_face_with_tear:",
        ":face_savoring_food:",
        ":face_with_tongue:",
        ":winking_face_with_tongue:",
        ":zany_face:",
        ":squinting_face_with_tongue: ",
        ":thinking_face:",
        ":neutral_face:",
        ":sleeping_face:",
    }
)

EMOTICONS = {
    "><": ":grinning_squinting_face:",
    "xD": ":grinning_squinting_face:",
    "ROFL": ":rolling_on_the_floor_laughing:",
    "LOL": ":face_with_tears_of_joy:",
    ":)": ":winking_face:",
    "^^": ":smiling_face_with_smiling_eyes:",
    ":-*": ":kissing_face:",
}


def has_emoji(shortcode: str) -> bool:
    """Return True if the shortcode names a known Emoji."""
    return shortcode in EMOJIS


def emoticon_shortcode(emoticon: str) -> str | None:
    """Return the Emoji shortcode an emoticon stands for, or None."""
    return EMOTICONS.get(emoticon)