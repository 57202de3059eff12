"""
Token utilities using tiktoken

FLOW OVERVIEW
- get_encoding_for_model(model): Resolve tiktoken encoding for a given model.
- count_tokens(text, model): Return token count using tiktoken for the given model.
"""

import tiktoken


def get_encoding_for_model(model: str):
    # Map common model families to encodings
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        # Fallback to cl100k_base commonly used across GPT-3.5/4 families
        return tiktoken.get_encoding('cl100k_base')


def count_tokens(text: str, model: str = 'gpt-4o-mini') -> int:
    if not text:
        return 0
    enc = get_encoding_for_model(model)
    return len(enc.encode(text))
