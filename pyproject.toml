[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pedalprog"
version = "1.0.0"
description = "Program USB foot switch pedals (PCsensor, Scythe and compatible devices) from the command line on Linux"
requires-python = ">=3.10"
dependencies = []
keywords = ["footswitch", "pedal", "usb", "hid", "hidraw", "keyboard", "scythe", "pcsensor"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware :: Universal Serial Bus (USB) :: Human Interface Device (HID)",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
footswitch = "pedalprog.footswitch:main"
footswitch1p = "pedalprog.footswitch1p:main"
scythe = "pedalprog.scythe:main"
scythe2 = "pedalprog.scythe2:main"

[tool.hatch.build.targets.wheel]
packages = ["pedalprog"]

[tool.pytest.ini_options]
addopts = "-ra"
