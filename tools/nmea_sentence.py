#!/usr/bin/env python3
"""
nmea_sentence.py - Sentence values handed to the DBS decoder

Framing (talker/message-id split, checksum check) happens upstream. This
module only describes what the router hands over.

Usage:
    from nmea_sentence import NmeaSentence, SentenceType

    sentence = NmeaSentence(
        talker_id='SD',
        message_id=SentenceType.DBS,
        data='7.8,f,2.4,M,1.3,F',
        checksum=0x0D,
    )
"""

from dataclasses import dataclass
from enum import Enum


class SentenceType(Enum):
    """NMEA 0183 sentence type tags."""
    AAM = 'AAM'
    ALM = 'ALM'
    APA = 'APA'
    APB = 'APB'
    BOD = 'BOD'
    BWC = 'BWC'
    BWR = 'BWR'
    BWW = 'BWW'
    DBK = 'DBK'
    DBS = 'DBS'
    DBT = 'DBT'
    DPT = 'DPT'
    GBS = 'GBS'
    GGA = 'GGA'
    GLL = 'GLL'
    GNS = 'GNS'
    GSA = 'GSA'
    GST = 'GST'
    GSV = 'GSV'
    HDG = 'HDG'
    HDM = 'HDM'
    HDT = 'HDT'
    MDA = 'MDA'
    MTW = 'MTW'
    MWD = 'MWD'
    MWV = 'MWV'
    RMB = 'RMB'
    RMC = 'RMC'
    ROT = 'ROT'
    RPM = 'RPM'
    RSA = 'RSA'
    TTM = 'TTM'
    TXT = 'TXT'
    VHW = 'VHW'
    VLW = 'VLW'
    VTG = 'VTG'
    VWR = 'VWR'
    WPL = 'WPL'
    XTE = 'XTE'
    ZDA = 'ZDA'

    @classmethod
    def from_tag(cls, tag: str) -> 'SentenceType':
        """Look up a type by its three-letter tag (case-insensitive)."""
        try:
            return cls(tag.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown sentence type: '{tag}'") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NmeaSentence:
    """A framed sentence: type tag plus the payload between the tag and '*'."""
    talker_id: str
    message_id: SentenceType
    data: str
    checksum: int = 0
