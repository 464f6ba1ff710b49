#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/__init__.py

from .normalize import normalize
from .image import ImageInput, load_image
from .result import Candidate, ProviderResult
from .parser import SingleGuess, RankedGuesses, extract_json_object, parse_guesses
from .providers import (
    ProviderAdapter,
    OpenRouterProvider,
    GeminiProvider,
    create_provider,
    register_provider,
)
from .vote import vote, ConsensusTally
from .dispatch import EnsembleDispatcher, DispatchOutcome

__all__ = [
    "normalize",
    "ImageInput",
    "load_image",
    "Candidate",
    "ProviderResult",
    "SingleGuess",
    "RankedGuesses",
    "extract_json_object",
    "parse_guesses",
    "ProviderAdapter",
    "OpenRouterProvider",
    "GeminiProvider",
    "create_provider",
    "register_provider",
    "vote",
    "ConsensusTally",
    "EnsembleDispatcher",
    "DispatchOutcome",
]
