from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).parent

# Read requirements (ignore comments and recursive -r entries)
req_path = ROOT / "requirements.txt"
requirements = []
if req_path.exists():
    for line in req_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("-r"):
            continue
        requirements.append(line)

# Exclude strict platform-specific markers from base install_requires
core_requirements = [
    r for r in requirements if not any(marker in r for marker in ["; platform_system==", "; platform_machine=="])
]

readme = (ROOT / "README.md").read_text(encoding="utf-8") if (ROOT / "README.md").exists() else ""

setup(
    name="growth-companion",
    version="1.0.0",
    description="Growth Companion: ledger-driven plant growth display for Raspberry Pi",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*", "docs")),
    py_modules=["companion_app"],
    python_requires=">=3.10,<4",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.7.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ],
        "test": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
        "hardware": [
            "RPi.GPIO>=0.7.1",
            "adafruit-blinka>=8.0.0",
            "adafruit-circuitpython-ssd1306>=2.12.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Home Automation",
        "Topic :: System :: Hardware",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
    ],
    keywords="raspberry-pi oled ssd1306 plant gamification postchain",
    entry_points={
        "console_scripts": [
            "growth-companion=companion_app:main",
        ]
    },
    include_package_data=True,
)
