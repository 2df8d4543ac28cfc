"""
日记枚举类型 - 心情、天气
"""
# 标准库导包
import enum


class Mood(enum.Enum):
    """心情，按名称持久化"""

    VERY_HAPPY = ("\U0001F604", "Very Happy")
    HAPPY = ("\U0001F60A", "Happy")
    NEUTRAL = ("\U0001F610", "Neutral")
    SAD = ("\U0001F61E", "Sad")
    VERY_SAD = ("\U0001F62D", "Very Sad")
    ANGRY = ("\U0001F620", "Angry")
    ANXIOUS = ("\U0001F630", "Anxious")
    TIRED = ("\U0001F62B", "Tired")
    EXCITED = ("\U0001F929", "Excited")
    PEACEFUL = ("\U0001F60C", "Peaceful")

    def __init__(self, emoji: str, label: str):
        self.emoji = emoji
        self.label = label


class Weather(enum.Enum):
    """天气，按名称持久化"""

    SUNNY = ("☀️", "Sunny")
    CLOUDY = ("☁️", "Cloudy")
    RAINY = ("\U0001F327️", "Rainy")
    SNOWY = ("❄️", "Snowy")
    WINDY = ("\U0001F32C️", "Windy")
    STORMY = ("⛈️", "Stormy")
    FOGGY = ("\U0001F32B️", "Foggy")

    def __init__(self, icon: str, label: str):
        self.icon = icon
        self.label = label
