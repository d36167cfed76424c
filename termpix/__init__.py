"""This package displays images in the terminal using terminal graphics protocols."""

__app_name__ = "termpix"
__version__ = "0.3.0"
__strapline__ = "Images in the terminal"
__author__ = "Josiah Outram Halstead"
__email__ = "josiah@halstead.email"
__copyright__ = f"© 2024, {__author__}"
__license__ = "MIT"
