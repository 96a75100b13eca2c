import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="bot-gateway",
    version="0.0.1",
    description="HTTP gateway serving identity, invitations and a message viewer for a peer-to-peer node",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["gateway", "gateway.*"]),
    package_data={"gateway": ["public/*"]},
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "requests",
        "qrcode",
    ],
    extras_require={
        "test": ["pytest", "httpx"],
    },
    entry_points={
        "console_scripts": ["bot-gateway=gateway.__main__:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
