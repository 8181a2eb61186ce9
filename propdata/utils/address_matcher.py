"""
Address Normalization and Exact Matching

Decides whether a candidate address returned by a listing feed or an open
data portal refers to the property that was asked for. Near misses are
rejected: returning data for the neighbour is worse than returning nothing.
"""

import re
from typing import List, Optional, Set


class AddressMatcher:
    """
    Address normalization and exact-match test for property lookups
    """

    # Common abbreviations and variations
    STREET_ABBREV = {
        # Streets
        'street': 'st', 'str': 'st',
        # Avenues
        'avenue': 'ave', 'av': 'ave', 'avn': 'ave',
        # Boulevards
        'boulevard': 'blvd', 'boul': 'blvd', 'blv': 'blvd',
        # Drives
        'drive': 'dr', 'drv': 'dr',
        # Roads
        'road': 'rd',
        # Lanes
        'lane': 'ln',
        # Places
        'place': 'pl',
        # Circles
        'circle': 'cir', 'circ': 'cir', 'circl': 'cir',
        # Courts
        'court': 'ct', 'crt': 'ct',
        # Crescents
        'crescent': 'cres', 'cr': 'cres',
        # Terraces
        'terrace': 'ter', 'terr': 'ter',
        # Trails
        'trail': 'trl', 'tr': 'trl',
        # Ways
        'way': 'way', 'wy': 'way',
        # Highways
        'highway': 'hwy', 'hiway': 'hwy',
        # Parkways
        'parkway': 'pkwy', 'pky': 'pkwy', 'parkwy': 'pkwy',
        # Directions (normalize)
        'north': 'n', 'south': 's', 'east': 'e', 'west': 'w',
        'northeast': 'ne', 'northwest': 'nw', 'southeast': 'se', 'southwest': 'sw',
    }

    STREET_TYPES = {
        'st', 'ave', 'blvd', 'dr', 'rd', 'ln', 'pl', 'cir', 'ct', 'cres',
        'ter', 'trl', 'way', 'hwy', 'pkwy', 'close', 'gate', 'row', 'sq',
    }

    DIRECTIONALS = {'n', 's', 'e', 'w', 'ne', 'nw', 'se', 'sw'}

    # Ordinal number patterns
    ORDINAL_PATTERN = re.compile(r'\b(\d+)(st|nd|rd|th)\b', re.IGNORECASE)

    # "Unit B, ..." / "#101, ..." leading unit segment
    UNIT_SEGMENT = re.compile(r'^\s*(?:unit|apt|suite|ste|#)\s*[\w-]+\s*,\s*', re.IGNORECASE)

    # "101-1234 Main St" / "#101-1234 Main St": unit, then civic number
    UNIT_CIVIC = re.compile(r'^\s*#?\s*[a-z]?\d+[a-z]?\s*-\s*(\d+)\b', re.IGNORECASE)

    def normalize_address(self, address: Optional[str]) -> str:
        """
        Normalize address to standard format for comparison

        Example:
            "20387 Dale Drive" -> "20387 dale dr"
            "456 SW 39th Avenue" -> "456 sw 39 ave"
        """
        if not address:
            return ""

        normalized = str(address).lower().strip()

        # Punctuation becomes a separator so "101-1234" splits into two tokens
        normalized = re.sub(r'[^\w\s]', ' ', normalized)
        normalized = normalized.replace('_', ' ')

        normalized = self.ORDINAL_PATTERN.sub(r'\1', normalized)

        tokens = [self.STREET_ABBREV.get(token, token) for token in normalized.split()]
        return ' '.join(tokens)

    def tokens(self, address: Optional[str]) -> List[str]:
        return self.normalize_address(address).split()

    def street_part(self, address: Optional[str]) -> str:
        """
        House number and street only: the unit and anything after the
        first comma (city, province, postal code) are dropped.

        Example:
            "#101-1234 Main St, Vancouver" -> "1234 Main St"
            "Unit B, 456 Oak Ave" -> "456 Oak Ave"
        """
        if not address:
            return ""
        text = self.UNIT_SEGMENT.sub('', str(address), count=1)
        text = text.split(',', 1)[0]
        return self.UNIT_CIVIC.sub(r'\1', text, count=1)

    def street_tokens(self, address: Optional[str]) -> List[str]:
        return self.tokens(self.street_part(address))

    def extract_street_number(self, address: Optional[str]) -> Optional[str]:
        """
        Civic number: first purely numeric token of the street part

        Example:
            "20387 Dale Drive" -> "20387"
            "Unit B, 456 Oak Ave" -> "456"
            "101-1234 Main St" -> "1234"
        """
        for token in self.street_tokens(address):
            if token.isdigit():
                return token
        return None

    def significant_tokens(self, address: Optional[str]) -> Set[str]:
        """Street-name tokens: not the house number, not a street type, not a directional."""
        number = self.extract_street_number(address)
        return {
            token for token in self.street_tokens(address)
            if token != number
            and token not in self.STREET_TYPES
            and token not in self.DIRECTIONALS
        }

    def is_exact_match(self, requested: str, candidate: Optional[str]) -> bool:
        """
        True when the candidate's street part carries the requested civic
        number and at least one significant street-name token of the
        requested address.
        """
        if not candidate:
            return False

        number = self.extract_street_number(requested)
        if not number:
            return False

        candidate_tokens = set(self.street_tokens(candidate))
        if number not in candidate_tokens:
            return False

        significant = self.significant_tokens(requested)
        if significant:
            return bool(significant & candidate_tokens)

        # Street named only by type/directional words, e.g. "North Road"
        rest = {token for token in self.street_tokens(requested) if token != number}
        return bool(rest) and rest <= candidate_tokens

    def cache_key(self, address: str, city: str) -> str:
        return f"{self.normalize_address(address)}|{self.normalize_address(city)}"


# Global matcher instance
_address_matcher = None

def get_address_matcher() -> AddressMatcher:
    """Get singleton AddressMatcher instance"""
    global _address_matcher
    if _address_matcher is None:
        _address_matcher = AddressMatcher()
    return _address_matcher
