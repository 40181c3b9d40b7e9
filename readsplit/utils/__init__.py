from .general import rev_comp, seq_to_fasta, seq_to_fastq
