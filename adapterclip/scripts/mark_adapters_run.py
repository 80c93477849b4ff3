#! /usr/bin/env python
"""
mark_adapters_run marks Illumina adapter read-through in sequencing reads
without trimming them.

Input is either one unaligned BAM file (add --paired when mates are stored
in consecutive records) or one FASTQ file (single end) or two FASTQ files
(paired end, always marked as pairs). Output is an unaligned BAM file.

Adapters are tried in the order given by --adapters (names are case
insensitive), after the custom pair given by --five-prime-adapter and
--three-prime-adapter if any. Single reads need --min-match-bases-se bases
of overlap with at most --max-error-rate-se mismatches, pairs use the -pe
thresholds and the two mates are reconciled into one clipping position.

Reads with an adapter carry the XT tag (1-based position where the adapter
starts). --metrics writes a JSON file with the counts of clipped reads per
adapter and per clipped length.

Example:
    mark_adapters_run.py sample_R1.fastq.gz sample_R2.fastq.gz --output marked.bam --metrics stats.json
"""

import argparse
import sys

from adapterclip.core.pipeline import Pipeline


def main() -> int:
    pipeline = Pipeline()
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)

    try:
        parser = pipeline.createParameters(parser)
        pipeline.load_parameters(parser.parse_args())
        pipeline.createLogger()
        pipeline.sanityCheck()
        print("AdapterClip, parameters checked. Marking adapters...")
        pipeline.run()
        print(f"AdapterClip, run completed! Output written to {pipeline.output_file}")
    except Exception as e:
        print("Error running the adapter marking")
        print(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
