from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fp:
    long_description = fp.read()

setup(
    name="neobuild",
    version="1.0.0",
    description="NeoBuild downloads and runs the NeoForge installer for a Minecraft version and "
                "keeps the client jar and data files needed to launch it.",
    author="NeoBuild contributors",
    packages=["neobuild", "neobuild.cli"],
    python_requires=">=3.8",
    install_requires=["certifi"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["neobuild = neobuild.cli:main"]},
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPL-3.0",
)
