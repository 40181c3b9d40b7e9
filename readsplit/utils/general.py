def seq_to_fasta(seq, name=None):
    return(">%s\n%s\n"%(name,seq))

def seq_to_fastq(seq, qual, name=None):
    return("@%s\n%s\n+\n%s\n"%(name,seq,qual))

def rev_comp(seq):
    " rev-comp a dna sequence with UIPAC characters ; courtesy of Max's crispor"
    revTbl = {'A' : 'T', 'C' : 'G', 'G' : 'C', 'T' : 'A', 'U' : 'A', 'N' : 'N' , 'M' : 'K', 'K' : 'M',
    "R" : "Y" , "Y":"R" , "g":"c", "a":"t", "c":"g","t":"a", "u":"a", "n":"n", "V" : "B", "v":"b", 
    "B" : "V", "b": "v", "W" : "W", "w" : "w", "S" : "S", "s" : "s", "D" : "H", "d" : "h",
    "H" : "D", "h" : "d", "-":"-"}

    newSeq = []
    for c in reversed(seq):
        newSeq.append(revTbl[c])
    return "".join(newSeq)
