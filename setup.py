# setup.py
from setuptools import setup, find_packages

setup(
    name="seo_scout",
    version="0.1.0",
    description="Асинхронный SEO-краулер SEO Scout",
    packages=find_packages(exclude=("tests", "tests.*")),  # найдёт seo_scout и подпакеты
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "seo-scout=seo_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
