"""
tftoolkit - Terraform Toolkit

Module-grouped terraform plan summaries, infracost cost tables and quality
checks for the terminal.
"""

__version__ = "2.0.0"
__author__ = "tftoolkit"
__description__ = "Terminal summaries for terraform plans, costs and checks"

from .parser import TerraformPlanParser
from .analyzer import PlanAnalyzer
from .generator import SummaryGenerator
from .style import Style

__all__ = ['TerraformPlanParser', 'PlanAnalyzer', 'SummaryGenerator', 'Style']
