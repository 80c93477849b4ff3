# coding=utf-8
"""
This is the main object for the adapter marking.
It contains the Pipeline object that has methods
to parse the input parameters, generate the input parameters,
do sanity check and ultimately run the adapter marking.
"""

import argparse
import inspect
import logging
import os
import sys

from adapterclip.common.adapters import DEFAULT_ADAPTERS, ILLUMINA_ADAPTERS, get_adapter_pairs, parse_custom_adapter
from adapterclip.common.clipping import (
    MAX_ERROR_RATE,
    MAX_PE_ERROR_RATE,
    MIN_MATCH_BASES,
    MIN_MATCH_PE_BASES,
    ClippingParameters,
)
from adapterclip.common.utils import TimeStamper, file_ok, safe_remove
from adapterclip.core.marking import mark_adapters_bam, mark_adapters_fastq
from adapterclip.version import version_number

logger = logging.getLogger("AdapterClip")

FASTQ_EXTENSIONS = (".fastq", ".fq", ".fastq.gz", ".fq.gz", ".fastq.bz2", ".fq.bz2")


class Pipeline:
    """
    This class contains the adapter marking
    attributes and a bunch of methods to parse
    the input parameters, do sanity check and
    run the marking.
    """

    def __init__(self) -> None:
        self.input_files = []
        self.output_file = None
        self.metrics_file = None
        self.adapter_names = list(DEFAULT_ADAPTERS)
        self.five_prime_adapter = None
        self.three_prime_adapter = None
        self.paired = False
        self.min_match_bases_se = MIN_MATCH_BASES
        self.min_match_bases_pe = MIN_MATCH_PE_BASES
        self.max_error_rate_se = MAX_ERROR_RATE
        self.max_error_rate_pe = MAX_PE_ERROR_RATE
        self.logfile = None
        self.verbose = False
        self.adapters = []
        self.qa_stats = None

    def is_bam_input(self) -> bool:
        return len(self.input_files) == 1 and self.input_files[0].endswith(".bam")

    def sanityCheck(self) -> None:
        """
        Performs some basic sanity checks on the input parameters
        and builds the list of adapters to search for
        """
        for input_file in self.input_files:
            if not file_ok(input_file):
                error = f"Error parsing parameters.\nInvalid input file {input_file}"
                logger.error(error)
                raise RuntimeError(error)

        if not self.is_bam_input() and (
            len(self.input_files) not in (1, 2)
            or not all(f.endswith(FASTQ_EXTENSIONS) for f in self.input_files)
        ):
            error = f"Error parsing parameters.\nIncorrect format for input files {' '.join(self.input_files)}"
            logger.error(error)
            raise RuntimeError(error)

        if len(self.input_files) == 2:
            self.paired = True
        elif self.paired and not self.is_bam_input():
            error = (
                "Error parsing parameters.\n"
                "Paired reads from FASTQ input require two files, use --paired only with a BAM file"
            )
            logger.error(error)
            raise RuntimeError(error)

        if self.output_file is None or not self.output_file.endswith(".bam"):
            error = f"Error parsing parameters.\nThe output file must be a BAM file {self.output_file}"
            logger.error(error)
            raise RuntimeError(error)

        if (self.five_prime_adapter is None) != (self.three_prime_adapter is None):
            error = "Error parsing parameters.\nBoth the 5' and the 3' custom adapters must be given"
            logger.error(error)
            raise RuntimeError(error)

        try:
            self.adapters = []
            if self.five_prime_adapter is not None:
                self.adapters.append(parse_custom_adapter(self.five_prime_adapter, self.three_prime_adapter))
            self.adapters.extend(get_adapter_pairs(self.adapter_names))
            # Validates the thresholds
            self.single_parameters()
            self.paired_parameters()
        except ValueError as e:
            error = f"Error parsing parameters.\n{e}"
            logger.error(error)
            raise RuntimeError(error)

        if len(self.adapters) == 0:
            error = "Error parsing parameters.\nNo adapters were given"
            logger.error(error)
            raise RuntimeError(error)

    def single_parameters(self) -> ClippingParameters:
        return ClippingParameters(self.min_match_bases_se, self.max_error_rate_se)

    def paired_parameters(self) -> ClippingParameters:
        return ClippingParameters(self.min_match_bases_pe, self.max_error_rate_pe)

    def createParameters(self, parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
        """
        Adds the pipeline's parameters to a given
        Argparse object and returns it.
        """
        parser.add_argument(
            "input_files",
            nargs="+",
            metavar="[FILE]",
            help="An unaligned BAM file or one (single end) or two (paired end) FASTQ files",
        )
        parser.add_argument(
            "--output", metavar="[FILE]", required=True, help="Path of the output BAM file with the marked reads"
        )
        parser.add_argument(
            "--metrics",
            metavar="[FILE]",
            default=None,
            help="Path of a JSON file to store the marking stats (default: no stats file)",
        )
        parser.add_argument(
            "--adapters",
            nargs="+",
            metavar="[STRING]",
            default=DEFAULT_ADAPTERS,
            help="Names of the adapters to search for (case insensitive), they are tried in the given order. "
            f"Valid adapters are {', '.join(ILLUMINA_ADAPTERS)} (default: %(default)s)",
        )
        parser.add_argument(
            "--five-prime-adapter",
            metavar="[STRING]",
            default=None,
            help="Sequence of a custom 5' adapter (requires --three-prime-adapter), "
            "the custom adapter is tried before the named ones",
        )
        parser.add_argument(
            "--three-prime-adapter",
            metavar="[STRING]",
            default=None,
            help="Sequence of a custom 3' adapter (requires --five-prime-adapter)",
        )
        parser.add_argument(
            "--paired",
            action="store_true",
            default=False,
            help="The input BAM file contains paired reads grouped by name "
            "(always enabled with two FASTQ files)",
        )
        parser.add_argument(
            "--min-match-bases-se",
            default=MIN_MATCH_BASES,
            metavar="[INT]",
            type=int,
            help="Minimum number of bases to match against the adapter in single reads (default: %(default)s)",
        )
        parser.add_argument(
            "--min-match-bases-pe",
            default=MIN_MATCH_PE_BASES,
            metavar="[INT]",
            type=int,
            help="Minimum number of bases to match against the adapter in paired reads (default: %(default)s)",
        )
        parser.add_argument(
            "--max-error-rate-se",
            default=MAX_ERROR_RATE,
            metavar="[FLOAT]",
            type=float,
            help="Maximum fraction of mismatching bases when matching single reads (default: %(default)s)",
        )
        parser.add_argument(
            "--max-error-rate-pe",
            default=MAX_PE_ERROR_RATE,
            metavar="[FLOAT]",
            type=float,
            help="Maximum fraction of mismatching bases when matching paired reads (default: %(default)s)",
        )
        parser.add_argument(
            "--verbose", action="store_true", default=False, help="Show extra information on the log file"
        )
        parser.add_argument(
            "--log-file",
            metavar="[STR]",
            default=None,
            help="Name of the file that we want to use to store the logs (default output to screen)",
        )
        parser.add_argument("--version", action="version", version="%(prog)s " + str(version_number))
        return parser

    def load_parameters(self, options: argparse.Namespace) -> None:
        """
        Load the input parameters from the argparse object given as parameter
        """
        self.input_files = [os.path.abspath(f) for f in options.input_files]
        self.output_file = os.path.abspath(options.output)
        if options.metrics is not None:
            self.metrics_file = os.path.abspath(options.metrics)
        self.adapter_names = list(options.adapters)
        self.five_prime_adapter = options.five_prime_adapter
        self.three_prime_adapter = options.three_prime_adapter
        self.paired = options.paired
        self.min_match_bases_se = options.min_match_bases_se
        self.min_match_bases_pe = options.min_match_bases_pe
        self.max_error_rate_se = options.max_error_rate_se
        self.max_error_rate_pe = options.max_error_rate_pe
        self.verbose = options.verbose
        if options.log_file is not None:
            self.logfile = os.path.abspath(options.log_file)

    def createLogger(self) -> None:
        """
        Creates a logging object and logs some information from the input parameters.
        """
        level = logging.DEBUG if self.verbose else logging.INFO
        if self.logfile is not None:
            logging.basicConfig(filename=self.logfile, level=level)
        else:
            logging.basicConfig(stream=sys.stdout, level=level)

        logger.info(f"AdapterClip {version_number}")
        logger.info(f"Input file/s: {' '.join(self.input_files)}")
        logger.info(f"Output file: {self.output_file}")
        if self.metrics_file is not None:
            logger.info(f"Metrics file: {self.metrics_file}")
        logger.info(f"Paired reads: {self.paired or len(self.input_files) == 2}")
        if self.five_prime_adapter is not None:
            logger.info(f"Custom adapter 5': {self.five_prime_adapter} 3': {self.three_prime_adapter}")
        logger.info(f"Adapters: {', '.join(self.adapter_names)}")
        logger.info(f"Minimum matching bases single/paired reads: {self.min_match_bases_se}/{self.min_match_bases_pe}")
        logger.info(f"Maximum error rate single/paired reads: {self.max_error_rate_se}/{self.max_error_rate_pe}")

    def run(self) -> None:
        """
        Runs the adapter marking.
        It logs information and running time.
        It throws Exceptions if something went wrong.
        """
        globaltime = TimeStamper()
        start_exe_time = globaltime.get_timestamp()
        logger.info(f"Starting the adapter marking: {start_exe_time}")

        for adapter in self.adapters:
            logger.debug(f"Adapter {adapter.name} 5': {adapter.five_prime} 3': {adapter.three_prime}")

        try:
            if self.is_bam_input():
                stats = mark_adapters_bam(
                    self.input_files[0],
                    self.output_file,
                    self.adapters,
                    self.paired,
                    self.single_parameters(),
                    self.paired_parameters(),
                )
            else:
                stats = mark_adapters_fastq(
                    self.input_files[0],
                    self.input_files[1] if len(self.input_files) == 2 else None,
                    self.output_file,
                    self.adapters,
                    self.single_parameters(),
                    self.paired_parameters(),
                )
        except Exception:
            # Do not leave a partial output behind
            safe_remove(self.output_file)
            raise

        stats.pipeline_version = version_number
        attributes = inspect.getmembers(self, lambda a: not (inspect.isroutine(a)))
        stats.input_parameters = {
            name: value
            for name, value in attributes
            if not name.startswith("__") and name not in ("adapters", "qa_stats")
        }
        self.qa_stats = stats
        if self.metrics_file is not None:
            stats.write_json(self.metrics_file)
            logger.info(f"Marking stats written to {self.metrics_file}")

        finish_exe_time = globaltime.get_timestamp()
        total_exe_time = finish_exe_time - start_exe_time
        logger.info(f"Total Execution Time: {total_exe_time}")
