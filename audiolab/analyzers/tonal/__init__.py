"""
Cepstral (mel filter bank, MFCC) and tonal (chroma, tonnetz) features.
"""

from audiolab.analyzers.tonal.cepstral import mel_filter_bank, dct_ii, mfcc
from audiolab.analyzers.tonal.chroma import chroma_vector, tonnetz, estimate_key

__all__ = [
    "mel_filter_bank",
    "dct_ii",
    "mfcc",
    "chroma_vector",
    "tonnetz",
    "estimate_key",
]
