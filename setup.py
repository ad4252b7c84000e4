"""
Setup configuration for tiny_firestore_odm package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="tiny-firestore-odm",
    version="0.2.6",
    author="tiny-firestore-odm contributors",
    description="A tiny object-document mapper for Google Firestore, focusing on a key/value object store usage model",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/paulgb/tiny-firestore-odm",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
    install_requires=[
        # Serialization relies on the private firestore_v1._helpers value codec
        "google-cloud-firestore>=2.14.0,<3.0.0",
        "google-api-core>=2.11.0",
        "google-auth>=2.23.0",
        "grpcio>=1.59.0",
        "pydantic>=2.5.0",
        "elasticsearch>=8.11.0",  # Optional log shipping, see logging.setup_logger
        "aiohttp>=3.9.0",  # Emulator admin endpoint
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
)
