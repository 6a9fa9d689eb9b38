from setuptools import setup, find_packages

setup(
    name="ragnok-verifier",
    version="1.0.0",
    description="Social identity verification and wallet attestation signing service",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "fastapi>=0.110.0",
        "pydantic>=2.0",
        "uvicorn>=0.27.0",
        "httpx>=0.27.0",
        "slowapi>=0.1.9",
        "python-json-logger>=3.1.0",
        "python-dotenv>=1.0.0",
        "eth-account>=0.11.0",
        "web3>=6.0.0",
        "eth-utils>=2.0.0",
    ],
    extras_require={"dev": ["pytest>=7.0", "pytest-asyncio>=0.21.0", "respx>=0.21.0"]},
    entry_points={"console_scripts": ["ragnok=ragnok.cli:main"]},
    python_requires=">=3.9",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Security :: Cryptography",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
    keywords="ethereum attestation allowlist twitter discord verification",
)
