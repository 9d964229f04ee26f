"""flashcards package.

JLPT vocabulary study sessions:
- deck: levels N5..N1, cards and the per-level store with shuffle
- persistence: the remembered level and per-level positions
- session: navigation, flip, swipe gestures and timed autoplay with speech

Run ``python -m flashcards --config config.yaml`` for a terminal session.
"""
